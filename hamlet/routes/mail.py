# hamlet/routes/mail.py
from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hamlet.database import get_db
from hamlet.game.clock import Clock, get_clock
from hamlet.models.mail_message import MailMessage
from hamlet.models.user import User
from hamlet.routes.auth import get_current_user

router = APIRouter(prefix="/mail", tags=["mail"])


def _safe_json_loads(s: str | None) -> Any:
    if not s:
        return None
    try:
        return json.loads(s)
    except ValueError:
        return None


def _to_dict(m: MailMessage) -> dict:
    d = {
        "id": int(m.id),
        "user_id": int(m.user_id),
        "kind": m.kind,
        "subject": m.subject,
        "body": m.body,
        "payload": _safe_json_loads(getattr(m, "payload_json", None)),
        "is_read": bool(int(getattr(m, "is_read", 0) or 0)),
        "created_at": m.created_at.isoformat() if m.created_at else None,
        "read_at": m.read_at.isoformat() if m.read_at else None,
    }
    payload = d["payload"]
    if isinstance(payload, dict) and isinstance(payload.get("village_id"), int):
        d["village_url"] = f"/villages/{payload['village_id']}"
    return d


def _get_own_message_or_404(db: Session, message_id: int, user_id: int) -> MailMessage:
    msg = db.query(MailMessage).filter(MailMessage.id == int(message_id)).first()
    # don't leak other users' message ids
    if not msg or int(msg.user_id) != int(user_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return msg


@router.get("/inbox")
def inbox(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(50, ge=1, le=500),
    unread_only: bool = Query(False),
    kind: Optional[str] = Query(None),
    before_id: Optional[int] = Query(None, ge=1),
) -> dict:
    """
    Returns the current user's inbox (newest first).
    Supports pagination via ?before_id=...
    """
    q = db.query(MailMessage).filter(MailMessage.user_id == int(current_user.id))

    if unread_only:
        q = q.filter(MailMessage.is_read == 0)

    if kind:
        q = q.filter(MailMessage.kind == kind)

    if before_id is not None:
        q = q.filter(MailMessage.id < int(before_id))

    msgs = q.order_by(MailMessage.id.desc()).limit(limit).all()

    return {
        "messages": [_to_dict(m) for m in msgs],
        "count": len(msgs),
        "next_before_id": (int(msgs[-1].id) if msgs else None),
    }


@router.get("/unread_count")
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    kind: Optional[str] = Query(None),
) -> dict:
    q = (
        db.query(MailMessage)
        .filter(MailMessage.user_id == int(current_user.id))
        .filter(MailMessage.is_read == 0)
    )

    if kind:
        q = q.filter(MailMessage.kind == kind)

    return {"kind": kind, "unread": int(q.count())}


@router.get("/{message_id}")
def read_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    return _to_dict(_get_own_message_or_404(db, message_id, current_user.id))


@router.post("/{message_id}/read")
def mark_read(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> dict:
    msg = _get_own_message_or_404(db, message_id, current_user.id)

    if int(getattr(msg, "is_read", 0) or 0) == 0:
        msg.is_read = 1
        msg.read_at = clock.now()
        db.commit()
        db.refresh(msg)

    return {"ok": True, "message": _to_dict(msg)}
