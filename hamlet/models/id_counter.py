# hamlet/models/id_counter.py
from __future__ import annotations

from sqlalchemy import BigInteger, String, event, insert
from sqlalchemy.orm import Mapped, mapped_column

from hamlet.database import Base

SEEDED_COUNTERS = ("villages",)


class IdCounter(Base):
    __tablename__ = "id_counters"

    # e.g. "villages"
    name: Mapped[str] = mapped_column(String(32), primary_key=True)

    # last id handed out; 0 = none yet
    value: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)


@event.listens_for(IdCounter.__table__, "after_create")
def _seed_counters(target, connection, **kw) -> None:
    # create_all path; the migration seeds the same rows
    connection.execute(insert(target), [{"name": n, "value": 0} for n in SEEDED_COUNTERS])
