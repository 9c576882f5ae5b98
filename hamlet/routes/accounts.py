# hamlet/routes/accounts.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hamlet.database import get_db
from hamlet.game import ledger
from hamlet.game.clock import Clock, get_clock
from hamlet.models.user import User
from hamlet.routes.auth import get_current_user, is_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


class GrantRequest(BaseModel):
    username: str = Field(min_length=3, max_length=32)
    amount: int = Field(gt=0)


@router.get("/me")
def my_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    holder = ledger.holder_for_user(current_user.id)
    return {"holder": holder, "balance": ledger.balance_of(db, holder)}


@router.post("/grant")
def grant(
    payload: GrantRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> dict:
    if not is_admin(x_admin_key):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    target = db.query(User).filter(User.username == payload.username).first()
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    holder = ledger.holder_for_user(target.id)
    ledger.credit(db, holder, payload.amount, now=clock.now())
    db.commit()

    logger.info("admin %s granted %s to %s", current_user.id, payload.amount, holder)
    return {"ok": True, "holder": holder, "balance": ledger.balance_of(db, holder)}


@router.get("/treasury")
def treasury(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> dict:
    if not is_admin(x_admin_key):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    holder = ledger.treasury_holder()
    return {"holder": holder, "balance": ledger.balance_of(db, holder)}
