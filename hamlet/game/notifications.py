# hamlet/game/notifications.py
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hamlet.game.catalog import display_name
from hamlet.models.mail_message import MailMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VillageCreated:
    village_id: int
    owner_id: int
    name: str
    at: datetime

    kind = "village_created"


@dataclass(frozen=True)
class BuildingUpgraded:
    village_id: int
    owner_id: int
    building_id: int
    new_level: int
    at: datetime
    completes_at: datetime
    cost: int

    kind = "building_upgraded"


VillageEvent = Union[VillageCreated, BuildingUpgraded]


def event_payload(event: VillageEvent) -> dict:
    out = {"kind": event.kind}
    for k, v in asdict(event).items():
        out[k] = v.isoformat() if isinstance(v, datetime) else v
    return out


def deliver_to_mailbox(db: Session, event: VillageEvent, *, subject: str, body: str) -> MailMessage:
    """Store `event` as an unread message for the village owner. Does NOT commit."""
    msg = MailMessage(
        user_id=int(event.owner_id),
        kind=event.kind,
        subject=subject,
        body=body,
        payload_json=json.dumps(event_payload(event)),
        is_read=0,
        created_at=event.at,
    )
    db.add(msg)
    db.flush()
    return msg


class NotificationSink(Protocol):
    def publish(self, db: Session, event: VillageEvent) -> None: ...


class MailboxSink:
    """
    Delivers events to the owner's mailbox.

    Called after the state mutation has committed. Delivery problems are
    logged and dropped; they never reach the caller of the operation.
    """

    def publish(self, db: Session, event: VillageEvent) -> None:
        subject, body = self._render(event)
        try:
            deliver_to_mailbox(db, event, subject=subject, body=body)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("could not deliver %s for village %s", event.kind, event.village_id)

    @staticmethod
    def _render(event: VillageEvent) -> tuple[str, str]:
        if isinstance(event, VillageCreated):
            return (
                f"Village founded: {event.name}",
                f"Village #{event.village_id} ({event.name}) is yours.",
            )
        name = display_name(event.building_id)
        return (
            f"{name} upgraded to level {event.new_level}",
            (
                f"Village #{event.village_id}: {name} reached level {event.new_level} "
                f"for {event.cost}. Builders are free again at {event.completes_at.isoformat()}."
            ),
        )


class RecordingSink:
    """Keeps events in memory. Handy for tests and dry runs."""

    def __init__(self) -> None:
        self.events: list[VillageEvent] = []

    def publish(self, db: Session, event: VillageEvent) -> None:
        self.events.append(event)


def get_sink() -> NotificationSink:
    # FastAPI dependency; overridden in tests
    return _DEFAULT_SINK


_DEFAULT_SINK = MailboxSink()
