from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from hamlet.game import catalog
from hamlet.game.clock import ManualClock
from hamlet.game.errors import VillageNotFound
from hamlet.game.villages import (
    LOCK_STRIPES,
    VILLAGE_COUNTER,
    _lock_for,
    allocate_village_id,
    building_levels,
    create_village,
    get_village,
    is_idle,
    mutate_village,
    seconds_until_idle,
)
from hamlet.models.id_counter import IdCounter
from hamlet.models.village import Village


def test_create_village_starts_idle_with_every_building_at_zero(db: Session, clock: ManualClock) -> None:
    village = create_village(db, name="Ashford", description="by the river", now=clock.now())
    db.commit()

    assert village.id == 1
    assert building_levels(village) == {b: 0 for b in catalog.building_ids()}
    assert village.upgrade_unlock_at == clock.now()
    assert is_idle(village, clock.now())
    assert seconds_until_idle(village, clock.now()) == 0


def test_ids_are_sequential_from_one(db: Session, clock: ManualClock) -> None:
    ids = [create_village(db, name=f"v{i}", description="", now=clock.now()).id for i in range(3)]
    db.commit()
    assert ids == [1, 2, 3]


def test_rolled_back_allocation_is_handed_out_again(db: Session, clock: ManualClock) -> None:
    create_village(db, name="first", description="", now=clock.now())
    db.commit()

    assert allocate_village_id(db) == 2
    db.rollback()

    assert create_village(db, name="second", description="", now=clock.now()).id == 2


def test_get_missing_village(db: Session) -> None:
    with pytest.raises(VillageNotFound):
        get_village(db, 42)


def test_mutate_commits_and_holds_the_village_lock(db: Session, clock: ManualClock) -> None:
    village = create_village(db, name="Ashford", description="", now=clock.now())
    db.commit()

    def _rename(v: Village) -> bool:
        v.description = "walled"
        return _lock_for(v.id).locked()

    assert mutate_village(db, village.id, _rename) is True
    assert not _lock_for(village.id).locked()

    db.expire_all()
    assert get_village(db, village.id).description == "walled"


def test_mutate_rolls_back_when_fn_raises(db: Session, clock: ManualClock) -> None:
    village = create_village(db, name="Ashford", description="", now=clock.now())
    db.commit()

    def _boom(v: Village) -> None:
        v.description = "half written"
        db.flush()
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        mutate_village(db, village.id, _boom)

    db.expire_all()
    assert get_village(db, village.id).description == ""
    assert not _lock_for(village.id).locked()


def test_mutate_missing_village(db: Session) -> None:
    with pytest.raises(VillageNotFound):
        mutate_village(db, 7, lambda v: None)


def test_village_locks_are_a_fixed_set() -> None:
    assert _lock_for(3) is _lock_for(3)
    assert _lock_for(3) is _lock_for(3 + LOCK_STRIPES)
    assert _lock_for(3) is not _lock_for(4)

    assert len({id(_lock_for(i)) for i in range(1, 10 * LOCK_STRIPES)}) == LOCK_STRIPES


def test_create_all_seeds_the_village_counter(db: Session) -> None:
    assert db.query(IdCounter.value).filter(IdCounter.name == VILLAGE_COUNTER).scalar() == 0


def test_missing_counter_row_is_recreated(db: Session, clock: ManualClock) -> None:
    db.query(IdCounter).delete()
    db.commit()

    assert create_village(db, name="first", description="", now=clock.now()).id == 1
    db.commit()
    assert create_village(db, name="second", description="", now=clock.now()).id == 2
