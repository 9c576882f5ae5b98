# hamlet/routes/catalog.py
from __future__ import annotations

from fastapi import APIRouter

from hamlet.game import catalog

router = APIRouter(prefix="/catalog", tags=["catalog"])


def _building_dict(building_id: int) -> dict:
    defn = catalog.get_building(building_id)
    req_id, req_level = catalog.prerequisite_pair(building_id)
    return {
        "building_id": defn.id,
        "key": defn.key,
        "name": defn.name,
        "max_level": catalog.max_level(building_id),
        "cost": catalog.upgrade_cost(building_id),
        # [0, 0] = no prerequisite
        "prerequisite": [req_id, req_level],
    }


@router.get("/buildings")
def list_buildings() -> dict:
    return {
        "buildings": [_building_dict(b) for b in catalog.building_ids()],
        "durations_seconds": {str(lvl): s for lvl, s in sorted(catalog.UPGRADE_DURATION_SECONDS.items())},
    }


@router.get("/buildings/{ref}")
def get_building(ref: str) -> dict:
    return _building_dict(catalog.resolve_building(ref))


@router.get("/durations/{level}")
def get_duration(level: int) -> dict:
    return {"level": level, "duration_seconds": catalog.upgrade_duration_seconds(level)}
