# hamlet/game/clock.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


def _now_utc_naive() -> datetime:
    # Naive UTC datetime (no tzinfo), whole seconds. Works cleanly with SQLite.
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return _now_utc_naive()


class ManualClock:
    """Clock that only moves when told to. Used by tests and simulations."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = (start or _now_utc_naive()).replace(microsecond=0)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: int) -> datetime:
        self._now = self._now + timedelta(seconds=seconds)
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when.replace(microsecond=0)


def get_clock() -> Clock:
    # FastAPI dependency; overridden in tests
    return _SYSTEM_CLOCK


_SYSTEM_CLOCK = SystemClock()
