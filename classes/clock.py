"""Server-side time source and deadline arithmetic for timed attempts.

Countdown values shown to the test-taker are advisory. Every deadline check is
recomputed here from the attempt's `started_at` and the server clock.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone


class SystemClock:
    """Wall clock in naive UTC, matching how the models store datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class ManualClock:
    """Clock that only moves when told to. Used to simulate elapsed time."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 1, 1, 9, 0, 0)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now += timedelta(seconds=seconds)
        return self._now


def deadline_for(started_at: datetime, time_limit_seconds: int | None) -> datetime | None:
    if not time_limit_seconds:
        return None
    return started_at + timedelta(seconds=time_limit_seconds)


def elapsed_seconds(started_at: datetime, now: datetime) -> float:
    return max(0.0, (now - started_at).total_seconds())


def is_past_deadline(started_at: datetime, time_limit_seconds: int | None, now: datetime) -> bool:
    """True once strictly more than the limit has elapsed."""
    if not time_limit_seconds:
        return False
    return elapsed_seconds(started_at, now) > time_limit_seconds


def remaining_seconds(started_at: datetime, time_limit_seconds: int | None, now: datetime) -> int | None:
    if not time_limit_seconds:
        return None
    left = time_limit_seconds - elapsed_seconds(started_at, now)
    return max(0, math.ceil(left))


def time_spent_seconds(started_at: datetime, time_limit_seconds: int | None, now: datetime, expired: bool) -> int:
    spent = int(elapsed_seconds(started_at, now))
    if expired and time_limit_seconds:
        return min(spent, time_limit_seconds)
    return spent
