"""Visible-row window and blink evaluation for the departures board."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Iterable

from src.logic.times import effective_time, parse_time, time_from_remarks

MAX_VISIBLE_ROWS = 5
GRACE_PERIOD = timedelta(minutes=2)
BLINK_LEAD = timedelta(minutes=5)


def reference_offset(row: Any, now: datetime) -> timedelta | None:
    """Best-known offset of a row: remark time first, then the nominal time."""
    remark_time = time_from_remarks(getattr(row, "remarks", None), now)
    if remark_time is not None:
        return remark_time.diff
    nominal = parse_time(getattr(row, "time", None), now)
    if nominal is not None:
        return nominal.diff
    return None


def is_within_grace(row: Any, now: datetime) -> bool:
    if getattr(row, "passed", False):
        return False
    offset = reference_offset(row, now)
    # Undetermined timing never hides a row.
    if offset is None:
        return True
    return offset >= -GRACE_PERIOD


def visible_rows(rows: Iterable[Any], now: datetime, limit: int = MAX_VISIBLE_ROWS) -> list[Any]:
    """Drop passed and long-gone rows, then keep the first ``limit`` in upstream order."""
    kept = [row for row in rows if is_within_grace(row, now)]
    return kept[: max(limit, 0)]


def should_blink(row: Any, now: datetime) -> bool:
    """True when the row's effective time is between 2 minutes ago and 5 minutes ahead."""
    if getattr(row, "passed", False):
        return False
    effective = effective_time(row, now)
    if effective is None:
        return False
    return -GRACE_PERIOD <= effective.diff <= BLINK_LEAD


__all__ = [
    "MAX_VISIBLE_ROWS",
    "GRACE_PERIOD",
    "BLINK_LEAD",
    "reference_offset",
    "is_within_grace",
    "visible_rows",
    "should_blink",
]
