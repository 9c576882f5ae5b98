# hamlet/models/village.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hamlet.database import Base


class Village(Base):
    __tablename__ = "villages"

    # Assigned by the village store's counter, never by the database
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)

    # Core identity (immutable after creation)
    name: Mapped[str] = mapped_column(String(40), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Earliest time a new upgrade may start. now >= upgrade_unlock_at => idle
    upgrade_unlock_at: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    buildings: Mapped[list["VillageBuilding"]] = relationship(
        back_populates="village",
        cascade="all, delete-orphan",
        order_by="VillageBuilding.building_id",
        lazy="selectin",
    )
