# hamlet/game/catalog.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from hamlet.game.errors import CatalogError, UnknownBuilding, UnknownLevel


# ----------------------------
# Buildings
# ----------------------------

@dataclass(frozen=True)
class Prerequisite:
    building_id: int
    level: int


@dataclass(frozen=True)
class BuildingDef:
    id: int
    key: str
    name: str
    max_level: int
    # flat cost in the base currency, same for every level
    cost: int
    prerequisite: Optional[Prerequisite] = None


TOWN_HALL = 1
FARM = 2
BARRACKS = 3
LUMBER_MILL = 4
QUARRY = 5
MARKET = 6
WALL = 7

BUILDINGS: dict[int, BuildingDef] = {
    TOWN_HALL:   BuildingDef(TOWN_HALL,   "townhall",   "Town Hall",   10, 500),
    FARM:        BuildingDef(FARM,        "farm",       "Farm",        10, 150),
    BARRACKS:    BuildingDef(BARRACKS,    "barracks",   "Barracks",    10, 400, Prerequisite(TOWN_HALL, 2)),
    LUMBER_MILL: BuildingDef(LUMBER_MILL, "lumbermill", "Lumber Mill", 10, 150),
    QUARRY:      BuildingDef(QUARRY,      "quarry",     "Quarry",      10, 200, Prerequisite(TOWN_HALL, 1)),
    MARKET:      BuildingDef(MARKET,      "market",     "Market",       5, 350, Prerequisite(TOWN_HALL, 3)),
    WALL:        BuildingDef(WALL,        "wall",       "Wall",         8, 300, Prerequisite(BARRACKS, 1)),
}

# Seconds to enter each level. Shared by every building.
UPGRADE_DURATION_SECONDS: dict[int, int] = {
    1: 60,
    2: 120,
    3: 300,
    4: 600,
    5: 1_200,
    6: 1_800,
    7: 3_600,
    8: 7_200,
    9: 14_400,
    10: 28_800,
}


# ----------------------------
# Names / normalization
# ----------------------------

ALIAS_TO_KEY: dict[str, str] = {
    "keep": "townhall",
    "town_hall": "townhall",

    "lumber_mill": "lumbermill",
    "sawmill": "lumbermill",

    "stone_mine": "quarry",
    "walls": "wall",
}

_KEY_TO_ID: dict[str, int] = {b.key: b.id for b in BUILDINGS.values()}


def _normalize_key(ref: str) -> str:
    key = (ref or "").strip().lower().replace("-", "_").replace(" ", "_")
    return ALIAS_TO_KEY.get(key, key)


def resolve_building(ref: int | str) -> int:
    """
    Accepts an id (int or numeric string), a key, a display name or an alias.
    """
    if isinstance(ref, bool):
        raise UnknownBuilding(building=ref)
    if isinstance(ref, int):
        get_building(ref)
        return ref

    text = str(ref).strip()
    if text.isascii() and text.isdigit():
        return resolve_building(int(text))

    building_id = _KEY_TO_ID.get(_normalize_key(text))
    if building_id is None:
        raise UnknownBuilding(building=ref)
    return building_id


def get_building(building_id: int) -> BuildingDef:
    defn = BUILDINGS.get(building_id)
    if defn is None:
        raise UnknownBuilding(building_id=building_id)
    return defn


def building_ids() -> list[int]:
    return sorted(BUILDINGS)


def display_name(building_id: int) -> str:
    return get_building(building_id).name


# ----------------------------
# Lookups
# ----------------------------

def max_level(building_id: int) -> int:
    return get_building(building_id).max_level


def upgrade_cost(building_id: int) -> int:
    return get_building(building_id).cost


def upgrade_duration_seconds(level: int) -> int:
    """Duration of the transition that produces `level`."""
    seconds = UPGRADE_DURATION_SECONDS.get(level)
    if seconds is None:
        raise UnknownLevel(level=level)
    return seconds


def prerequisite(building_id: int) -> Optional[Prerequisite]:
    return get_building(building_id).prerequisite


def prerequisite_pair(building_id: int) -> Tuple[int, int]:
    # (0, 0) means "no prerequisite"
    req = prerequisite(building_id)
    if req is None:
        return (0, 0)
    return (req.building_id, req.level)


# ----------------------------
# Load-time validation
# ----------------------------

def validate_catalog(
    buildings: dict[int, BuildingDef],
    durations: dict[int, int],
) -> None:
    if not buildings:
        raise CatalogError("catalog has no buildings")

    for building_id, defn in buildings.items():
        if defn.id != building_id:
            raise CatalogError(f"building {building_id} is keyed under the wrong id ({defn.id})")
        if building_id <= 0:
            raise CatalogError(f"building id must be positive, got {building_id}")
        if defn.max_level <= 0:
            raise CatalogError(f"{defn.key}: max_level must be positive")
        if defn.cost < 0:
            raise CatalogError(f"{defn.key}: cost must not be negative")

        missing = [lvl for lvl in range(1, defn.max_level + 1) if lvl not in durations]
        if missing:
            raise CatalogError(f"{defn.key}: no upgrade duration for levels {missing}")

        req = defn.prerequisite
        if req is None:
            continue
        if req.building_id == building_id:
            raise CatalogError(f"{defn.key}: building cannot require itself")
        target = buildings.get(req.building_id)
        if target is None:
            raise CatalogError(f"{defn.key}: prerequisite names unknown building {req.building_id}")
        if not 1 <= req.level <= target.max_level:
            raise CatalogError(
                f"{defn.key}: prerequisite level {req.level} outside 1..{target.max_level} for {target.key}"
            )

    for lvl, seconds in durations.items():
        if lvl <= 0 or seconds <= 0:
            raise CatalogError(f"invalid duration entry {lvl} -> {seconds}")

    keys = {b.key for b in buildings.values()}
    if len(keys) != len(buildings):
        raise CatalogError("building keys must be unique")
    for alias, key in ALIAS_TO_KEY.items():
        if key not in keys:
            raise CatalogError(f"alias {alias!r} points at unknown key {key!r}")


validate_catalog(BUILDINGS, UPGRADE_DURATION_SECONDS)
