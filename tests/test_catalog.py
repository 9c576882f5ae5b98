from __future__ import annotations

import pytest

from hamlet.game import catalog
from hamlet.game.catalog import BuildingDef, Prerequisite, validate_catalog
from hamlet.game.errors import CatalogError, UnknownBuilding, UnknownLevel


def test_lookups_for_town_hall() -> None:
    assert catalog.max_level(catalog.TOWN_HALL) == 10
    assert catalog.upgrade_cost(catalog.TOWN_HALL) == 500
    assert catalog.prerequisite(catalog.TOWN_HALL) is None
    assert catalog.prerequisite_pair(catalog.TOWN_HALL) == (0, 0)


def test_barracks_requires_town_hall_two() -> None:
    assert catalog.prerequisite(catalog.BARRACKS) == Prerequisite(catalog.TOWN_HALL, 2)
    assert catalog.prerequisite_pair(catalog.BARRACKS) == (1, 2)


def test_duration_is_keyed_by_level_entered() -> None:
    assert catalog.upgrade_duration_seconds(1) == 60
    assert catalog.upgrade_duration_seconds(2) == 120
    assert catalog.upgrade_duration_seconds(10) == 28_800


@pytest.mark.parametrize("level", [0, -1, 11, 99])
def test_duration_outside_table_is_unknown_level(level: int) -> None:
    with pytest.raises(UnknownLevel):
        catalog.upgrade_duration_seconds(level)


@pytest.mark.parametrize(
    "lookup",
    [catalog.max_level, catalog.upgrade_cost, catalog.prerequisite, catalog.prerequisite_pair],
)
def test_unknown_building_lookups(lookup) -> None:
    with pytest.raises(UnknownBuilding):
        lookup(999)


@pytest.mark.parametrize(
    "ref,expected",
    [
        (1, catalog.TOWN_HALL),
        ("1", catalog.TOWN_HALL),
        ("townhall", catalog.TOWN_HALL),
        ("Town Hall", catalog.TOWN_HALL),
        ("keep", catalog.TOWN_HALL),
        ("lumber-mill", catalog.LUMBER_MILL),
        ("Sawmill", catalog.LUMBER_MILL),
        (" barracks ", catalog.BARRACKS),
    ],
)
def test_resolve_building_accepts_ids_names_and_aliases(ref, expected: int) -> None:
    assert catalog.resolve_building(ref) == expected


@pytest.mark.parametrize("ref", ["castle", "", "0", "42", "²", "٣", 0, True])
def test_resolve_building_rejects_unknown(ref) -> None:
    with pytest.raises(UnknownBuilding):
        catalog.resolve_building(ref)


def test_every_building_can_reach_its_max_level() -> None:
    for building_id in catalog.building_ids():
        for lvl in range(1, catalog.max_level(building_id) + 1):
            assert catalog.upgrade_duration_seconds(lvl) > 0


def test_validation_rejects_missing_duration() -> None:
    buildings = {1: BuildingDef(1, "hut", "Hut", 3, 10)}
    with pytest.raises(CatalogError, match="no upgrade duration"):
        validate_catalog(buildings, {1: 10, 2: 20})


def test_validation_rejects_dangling_prerequisite() -> None:
    buildings = {1: BuildingDef(1, "townhall", "Town Hall", 2, 10, Prerequisite(9, 1))}
    with pytest.raises(CatalogError, match="unknown building"):
        validate_catalog(buildings, {1: 10, 2: 20})


def test_validation_rejects_unreachable_prerequisite_level() -> None:
    buildings = {
        1: BuildingDef(1, "townhall", "Town Hall", 2, 10),
        2: BuildingDef(2, "farm", "Farm", 2, 10, Prerequisite(1, 3)),
    }
    with pytest.raises(CatalogError, match="outside"):
        validate_catalog(buildings, {1: 10, 2: 20})
