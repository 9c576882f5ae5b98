# hamlet/models/village_building.py
from __future__ import annotations

from sqlalchemy import Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hamlet.database import Base


class VillageBuilding(Base):
    __tablename__ = "village_buildings"
    __table_args__ = (
        UniqueConstraint("village_id", "building_id", name="uq_village_buildings_village_building"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    village_id: Mapped[int] = mapped_column(ForeignKey("villages.id"), index=True, nullable=False)
    village: Mapped["Village"] = relationship(back_populates="buildings")

    building_id: Mapped[int] = mapped_column(Integer, nullable=False)  # catalog id, e.g. 1 = Town Hall
    level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)    # 0 = not built yet
