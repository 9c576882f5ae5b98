# hamlet/game/registry.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from hamlet.game.errors import NotOwner, TokenAlreadyMinted, VillageNotFound
from hamlet.models.village_token import VillageToken

logger = logging.getLogger(__name__)


def _token_for(db: Session, village_id: int) -> Optional[VillageToken]:
    return db.query(VillageToken).filter(VillageToken.village_id == int(village_id)).first()


def mint(db: Session, *, village_id: int, owner_id: int, now: datetime) -> VillageToken:
    """
    Bind a new ownership token to `village_id`.
    Does NOT commit; the caller's transaction covers the village row too.
    """
    if _token_for(db, village_id) is not None:
        raise TokenAlreadyMinted(village_id=village_id)

    token = VillageToken(
        village_id=int(village_id),
        owner_id=int(owner_id),
        minted_at=now,
    )
    db.add(token)
    db.flush()
    return token


def owner_of(db: Session, village_id: int) -> Optional[int]:
    token = _token_for(db, village_id)
    return int(token.owner_id) if token else None


def is_owner(db: Session, *, village_id: int, actor_id: int) -> bool:
    owner = owner_of(db, village_id)
    return owner is not None and owner == int(actor_id)


def villages_owned_by(db: Session, owner_id: int) -> list[int]:
    rows = (
        db.query(VillageToken.village_id)
        .filter(VillageToken.owner_id == int(owner_id))
        .order_by(VillageToken.village_id.asc())
        .all()
    )
    return [int(r[0]) for r in rows]


def transfer(
    db: Session,
    *,
    village_id: int,
    from_id: int,
    to_id: int,
    now: datetime,
) -> VillageToken:
    """Move the token to `to_id`. Does NOT commit."""
    token = _token_for(db, village_id)
    if token is None:
        raise VillageNotFound(village_id=village_id)
    if int(token.owner_id) != int(from_id):
        raise NotOwner(village_id=village_id, actor_id=from_id)

    token.owner_id = int(to_id)
    token.transferred_at = now
    db.flush()

    logger.info("village %s transferred from user %s to user %s", village_id, from_id, to_id)
    return token
