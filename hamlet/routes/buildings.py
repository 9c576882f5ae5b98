# hamlet/routes/buildings.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hamlet.database import get_db
from hamlet.game import catalog
from hamlet.game.clock import Clock, get_clock
from hamlet.game.errors import UnknownBuilding, VillageError
from hamlet.game.notifications import NotificationSink, get_sink
from hamlet.game.upgrades import preview_upgrade, upgrade_building
from hamlet.game.villages import get_village
from hamlet.models.user import User
from hamlet.routes.auth import get_current_user

router = APIRouter(prefix="/villages", tags=["buildings"])


def _resolve(db: Session, village_id: int, ref: str) -> int:
    try:
        return catalog.resolve_building(ref)
    except UnknownBuilding:
        # a missing village outranks an unknown building
        get_village(db, village_id)
        raise


class UpgradeRequest(BaseModel):
    # id ("3"), key ("barracks") or display name ("Town Hall")
    building: str = Field(min_length=1, max_length=32)


@router.get("/{village_id}/upgrade/preview")
def preview(
    village_id: int,
    building: str = Query(..., min_length=1, max_length=32),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> dict:
    now = clock.now()
    try:
        building_id = _resolve(db, village_id, building)
        plan = preview_upgrade(
            db,
            actor_id=current_user.id,
            village_id=village_id,
            building_id=building_id,
            now=now,
        )
    except VillageError as e:
        return {"allowed": False, "requested": building, **e.to_detail()}

    return {
        "allowed": True,
        "building_id": plan.building_id,
        "building_name": catalog.display_name(plan.building_id),
        "from_level": plan.from_level,
        "to_level": plan.to_level,
        "cost": plan.cost,
        "duration_seconds": plan.duration_seconds,
        "completes_at": plan.completes_at.isoformat(),
    }


@router.post("/{village_id}/upgrade")
def start_upgrade(
    village_id: int,
    payload: UpgradeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    sink: NotificationSink = Depends(get_sink),
) -> dict:
    now = clock.now()
    building_id = _resolve(db, village_id, payload.building)

    result = upgrade_building(
        db,
        actor_id=current_user.id,
        village_id=village_id,
        building_id=building_id,
        now=now,
        sink=sink,
    )

    return {
        "status": "upgraded",
        "village_id": result.village_id,
        "building_id": result.building_id,
        "building_name": catalog.display_name(result.building_id),
        "new_level": result.new_level,
        "cost": result.cost,
        "upgrade_unlock_at": result.upgrade_unlock_at.isoformat(),
        "duration_seconds": int((result.upgrade_unlock_at - result.upgraded_at).total_seconds()),
    }
