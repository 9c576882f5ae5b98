# hamlet/routes/villages.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hamlet.database import get_db
from hamlet.game import catalog, registry
from hamlet.game.clock import Clock, get_clock
from hamlet.game.errors import NotOwner
from hamlet.game.notifications import NotificationSink, get_sink
from hamlet.game.upgrades import build_village, transfer_village
from hamlet.game.villages import get_village, is_idle, seconds_until_idle
from hamlet.models.user import User
from hamlet.models.village import Village
from hamlet.routes.auth import get_current_user, is_admin

router = APIRouter(prefix="/villages", tags=["villages"])


class BuildVillageRequest(BaseModel):
    name: str = Field(min_length=1, max_length=40)
    description: str = Field(default="", max_length=500)


class TransferRequest(BaseModel):
    to_username: str = Field(min_length=3, max_length=32)


def village_view(db: Session, village: Village, now) -> dict:
    return {
        "village_id": village.id,
        "name": village.name,
        "description": village.description,
        "owner_id": registry.owner_of(db, village.id),
        "buildings": [
            {
                "building_id": b.building_id,
                "key": catalog.get_building(b.building_id).key,
                "name": catalog.display_name(b.building_id),
                "level": b.level,
                "max_level": catalog.max_level(b.building_id),
            }
            for b in village.buildings
        ],
        "upgrade_unlock_at": village.upgrade_unlock_at.isoformat(),
        "state": "idle" if is_idle(village, now) else "upgrading",
        "seconds_remaining": seconds_until_idle(village, now),
        "created_at": village.created_at.isoformat(),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create(
    payload: BuildVillageRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    sink: NotificationSink = Depends(get_sink),
) -> dict:
    now = clock.now()
    village = build_village(
        db,
        actor_id=current_user.id,
        name=payload.name,
        description=payload.description,
        now=now,
        sink=sink,
    )
    return village_view(db, village, now)


@router.get("/{village_id}")
def read(
    village_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> dict:
    village = get_village(db, village_id)
    if not is_admin(x_admin_key) and not registry.is_owner(
        db, village_id=village.id, actor_id=current_user.id
    ):
        raise NotOwner(village_id=village.id, actor_id=current_user.id)

    return village_view(db, village, clock.now())


@router.post("/{village_id}/transfer")
def transfer(
    village_id: int,
    payload: TransferRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> dict:
    target = db.query(User).filter(User.username == payload.to_username).first()
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    token = transfer_village(
        db,
        actor_id=current_user.id,
        village_id=village_id,
        to_id=target.id,
        now=clock.now(),
    )

    return {
        "ok": True,
        "village_id": int(village_id),
        "owner_id": int(token.owner_id),
        "transferred_at": token.transferred_at.isoformat(),
    }
