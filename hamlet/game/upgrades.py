# hamlet/game/upgrades.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from hamlet.game import catalog, ledger, registry
from hamlet.game.catalog import BuildingDef
from hamlet.game.errors import (
    InsufficientFunds,
    MaxLevelReached,
    NotOwner,
    PrerequisiteNotMet,
    UpgradeInProgress,
    VillageError,
)
from hamlet.game.notifications import (
    BuildingUpgraded,
    NotificationSink,
    VillageCreated,
)
from hamlet.game.villages import (
    building_levels,
    building_row,
    create_village,
    get_village,
    is_idle,
    mutate_village,
)
from hamlet.models.village import Village
from hamlet.models.village_token import VillageToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradePlan:
    village_id: int
    building_id: int
    from_level: int
    to_level: int
    cost: int
    duration_seconds: int
    completes_at: datetime


@dataclass(frozen=True)
class UpgradeResult:
    village_id: int
    building_id: int
    new_level: int
    cost: int
    upgraded_at: datetime
    upgrade_unlock_at: datetime


# ----------------------------
# Validation
# ----------------------------

def _check_upgrade(
    db: Session,
    *,
    village: Village,
    actor_id: int,
    building_id: int,
    now: datetime,
) -> UpgradePlan:
    """
    Checks 2..6, in order. The village was already found (check 1) and the
    funds check (7) is done by the caller so it can share the debit.
    """
    defn: BuildingDef = catalog.get_building(building_id)

    if not registry.is_owner(db, village_id=village.id, actor_id=actor_id):
        raise NotOwner(village_id=village.id, actor_id=actor_id)

    if not is_idle(village, now):
        raise UpgradeInProgress(
            village_id=village.id,
            upgrade_unlock_at=village.upgrade_unlock_at,
            seconds_remaining=int((village.upgrade_unlock_at - now).total_seconds()),
        )

    levels = building_levels(village)
    current = levels[defn.id]
    if current >= defn.max_level:
        raise MaxLevelReached(building_id=defn.id, level=current, max_level=defn.max_level)

    req = defn.prerequisite
    if req is not None:
        have = levels.get(req.building_id, 0)
        if have < req.level:
            raise PrerequisiteNotMet(
                building_id=defn.id,
                missing=[{"building_id": req.building_id, "need": req.level, "have": have}],
            )

    to_level = current + 1
    seconds = catalog.upgrade_duration_seconds(to_level)
    return UpgradePlan(
        village_id=village.id,
        building_id=defn.id,
        from_level=current,
        to_level=to_level,
        cost=defn.cost,
        duration_seconds=seconds,
        completes_at=now + timedelta(seconds=seconds),
    )


def preview_upgrade(
    db: Session,
    *,
    actor_id: int,
    village_id: int,
    building_id: int,
    now: datetime,
) -> UpgradePlan:
    """Same checks as upgrade_building, nothing is written."""
    village = get_village(db, village_id)
    plan = _check_upgrade(db, village=village, actor_id=actor_id, building_id=building_id, now=now)

    holder = ledger.holder_for_user(actor_id)
    have = ledger.balance_of(db, holder)
    if have < plan.cost:
        raise InsufficientFunds(holder=holder, need=plan.cost, have=have)
    return plan


# ----------------------------
# Operations
# ----------------------------

def upgrade_building(
    db: Session,
    *,
    actor_id: int,
    village_id: int,
    building_id: int,
    now: datetime,
    sink: Optional[NotificationSink] = None,
) -> UpgradeResult:
    """
    Raise `building_id` in `village_id` by one level.

    Validation order (first failure wins): village exists, building known,
    actor owns the village, village idle, below max level, prerequisite met,
    actor can pay. On success the level, the unlock time and the payment are
    committed together, then the upgrade event is published.
    """

    def _apply(village: Village) -> UpgradeResult:
        plan = _check_upgrade(
            db, village=village, actor_id=actor_id, building_id=building_id, now=now
        )

        # check 7 is the debit itself
        ledger.pay_treasury(db, ledger.holder_for_user(actor_id), plan.cost, now=now)

        row = building_row(village, plan.building_id)
        row.level = plan.to_level
        village.upgrade_unlock_at = plan.completes_at
        db.flush()

        return UpgradeResult(
            village_id=village.id,
            building_id=plan.building_id,
            new_level=plan.to_level,
            cost=plan.cost,
            upgraded_at=now,
            upgrade_unlock_at=plan.completes_at,
        )

    try:
        result = mutate_village(db, village_id, _apply)
    except VillageError as e:
        logger.warning(
            "upgrade rejected: village=%s building=%s actor=%s error=%s",
            village_id, building_id, actor_id, e.code,
        )
        raise

    logger.info(
        "village %s: building %s -> level %s (unlock at %s)",
        result.village_id, result.building_id, result.new_level,
        result.upgrade_unlock_at.isoformat(),
    )

    if sink is not None:
        sink.publish(
            db,
            BuildingUpgraded(
                village_id=result.village_id,
                owner_id=int(actor_id),
                building_id=result.building_id,
                new_level=result.new_level,
                at=now,
                completes_at=result.upgrade_unlock_at,
                cost=result.cost,
            ),
        )
    return result


def build_village(
    db: Session,
    *,
    actor_id: int,
    name: str,
    description: str,
    now: datetime,
    sink: Optional[NotificationSink] = None,
) -> Village:
    """
    Create a village and mint its ownership token to `actor_id`.
    Both rows commit together or not at all.
    """
    try:
        village = create_village(db, name=name, description=description, now=now)
        registry.mint(db, village_id=village.id, owner_id=actor_id, now=now)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(village)
    logger.info("village %s (%r) founded by user %s", village.id, village.name, actor_id)

    if sink is not None:
        sink.publish(
            db,
            VillageCreated(village_id=village.id, owner_id=int(actor_id), name=village.name, at=now),
        )
    return village


def transfer_village(
    db: Session,
    *,
    actor_id: int,
    village_id: int,
    to_id: int,
    now: datetime,
) -> VillageToken:
    """
    Hand `village_id` from `actor_id` to `to_id`.
    Runs under the same village lock as upgrades, so an upgrade that passed
    its ownership check commits before the token moves.
    """
    return mutate_village(
        db,
        village_id,
        lambda village: registry.transfer(
            db, village_id=village.id, from_id=actor_id, to_id=to_id, now=now
        ),
    )
