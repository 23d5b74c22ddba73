"""
Working-time arithmetic for schedules and attendance.

Clock times are ``HH:MM`` strings. A shift whose end is earlier than its
start crosses midnight, so ``22:00`` to ``06:00`` lasts eight hours.
Durations are kept in whole minutes and only turned into hours for
display.

Usage:
    shift_minutes("09:00", "17:30")        # 510
    minutes_to_hours(510)                  # 8.5
    schedule_deviation("09:10", "17:30", "09:00", "17:00")
    # Deviation(late_minutes=10, overtime_minutes=20)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable

MINUTES_PER_DAY = 24 * 60

_CLOCK = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def clock_to_minutes(value: str) -> int:
    """``"07:45"`` -> ``465``. Raises ValueError for anything but ``HH:MM``."""
    match = _CLOCK.match(value or "")
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def shift_minutes(start: str, end: str) -> int:
    """Length of a shift; wraps past midnight. A zero-length shift is invalid."""
    minutes = (clock_to_minutes(end) - clock_to_minutes(start)) % MINUTES_PER_DAY
    if minutes == 0:
        raise ValueError("Shift end must differ from its start")
    return minutes


def minutes_to_hours(minutes: int | None) -> float:
    return round((minutes or 0) / 60, 2)


def hours_to_minutes(hours: float | None) -> int | None:
    return None if hours is None else round(hours * 60)


def weekly_minutes(daily_minutes: Iterable[int | None]) -> int:
    return sum(minutes or 0 for minutes in daily_minutes)


@dataclass(frozen=True)
class Deviation:
    late_minutes: int
    # Negative when the employee worked less than planned
    overtime_minutes: int


def _circular_offset(actual: int, planned: int) -> int:
    """Signed distance from ``planned`` to ``actual``, folded into -12h..+12h."""
    offset = (actual - planned) % MINUTES_PER_DAY
    return offset - MINUTES_PER_DAY if offset > MINUTES_PER_DAY // 2 else offset


def schedule_deviation(
    actual_start: str,
    actual_end: str,
    planned_start: str,
    planned_end: str,
) -> Deviation:
    """Lateness and overtime of a worked shift against the planned one."""
    late = max(0, _circular_offset(clock_to_minutes(actual_start), clock_to_minutes(planned_start)))
    overtime = shift_minutes(actual_start, actual_end) - shift_minutes(planned_start, planned_end)
    return Deviation(late_minutes=late, overtime_minutes=overtime)
