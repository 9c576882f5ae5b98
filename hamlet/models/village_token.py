# hamlet/models/village_token.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from hamlet.database import Base


class VillageToken(Base):
    """Ownership token: exactly one per village."""

    __tablename__ = "village_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)

    village_id: Mapped[int] = mapped_column(
        ForeignKey("villages.id"), unique=True, index=True, nullable=False
    )
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)

    minted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    transferred_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
