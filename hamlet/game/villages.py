# hamlet/game/villages.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Tuple, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hamlet.game.catalog import building_ids
from hamlet.game.errors import VillageNotFound
from hamlet.models.id_counter import IdCounter
from hamlet.models.village import Village
from hamlet.models.village_building import VillageBuilding

T = TypeVar("T")

VILLAGE_COUNTER = "villages"

# ----------------------------
# Per-village locks
# ----------------------------

# striped: villages sharing a stripe also share a lock, memory stays fixed
LOCK_STRIPES = 64
_LOCKS: Tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _lock_for(village_id: int) -> threading.Lock:
    return _LOCKS[int(village_id) % LOCK_STRIPES]


@contextmanager
def village_lock(village_id: int) -> Iterator[None]:
    """Serializes writers of one village inside this process."""
    lock = _lock_for(int(village_id))
    with lock:
        yield


# ----------------------------
# Id allocation
# ----------------------------

def allocate_village_id(db: Session) -> int:
    """
    Increment-and-read inside the caller's transaction.
    A rollback hands the id back, so ids stay dense.
    """
    result = db.execute(
        update(IdCounter)
        .where(IdCounter.name == VILLAGE_COUNTER)
        .values(value=IdCounter.value + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # counter row missing (normally seeded with the table)
        try:
            with db.begin_nested():
                db.add(IdCounter(name=VILLAGE_COUNTER, value=1))
        except IntegrityError:
            # another writer seeded it first
            return allocate_village_id(db)
        return 1

    value = db.query(IdCounter.value).filter(IdCounter.name == VILLAGE_COUNTER).scalar()
    return int(value)


# ----------------------------
# Store
# ----------------------------

def create_village(db: Session, *, name: str, description: str, now: datetime) -> Village:
    """Does NOT commit."""
    village = Village(
        id=allocate_village_id(db),
        name=name,
        description=description or "",
        upgrade_unlock_at=now,
        created_at=now,
    )
    village.buildings = [VillageBuilding(building_id=b, level=0) for b in building_ids()]
    db.add(village)
    db.flush()
    return village


def get_village(db: Session, village_id: int, *, for_update: bool = False) -> Village:
    q = db.query(Village).filter(Village.id == int(village_id))
    if for_update:
        q = q.with_for_update()
    village = q.first()
    if village is None:
        raise VillageNotFound(village_id=village_id)
    return village


def mutate_village(db: Session, village_id: int, fn: Callable[[Village], T]) -> T:
    """
    Atomic read-modify-write of one village.

    Holds the village lock and a row lock for the whole call, commits when
    `fn` returns and rolls back if anything raises.
    """
    with village_lock(village_id):
        try:
            village = get_village(db, village_id, for_update=True)
            result = fn(village)
            db.commit()
        except Exception:
            db.rollback()
            raise
    return result


def building_levels(village: Village) -> dict[int, int]:
    return {int(b.building_id): int(b.level) for b in village.buildings}


def building_row(village: Village, building_id: int) -> VillageBuilding:
    for b in village.buildings:
        if int(b.building_id) == int(building_id):
            return b
    # every catalog building gets a row at creation
    raise LookupError(f"village {village.id} has no row for building {building_id}")


def is_idle(village: Village, now: datetime) -> bool:
    return now >= village.upgrade_unlock_at


def seconds_until_idle(village: Village, now: datetime) -> int:
    return max(0, int((village.upgrade_unlock_at - now).total_seconds()))
