"""Schedule time arithmetic: HH:MM parsing, remark delays and effective times.

Every function takes ``now`` explicitly and returns ``None`` instead of raising
on malformed input, so one unparseable row never breaks a render.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import re
from typing import Any

from src.logic.status import ATRASADO

ROLLOVER_THRESHOLD = timedelta(hours=12)
ONE_DAY = timedelta(days=1)

_LEADING_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})")
_REMARK_TIME_RE = re.compile(r"(\d{1,2}:\d{2})")
_DELAY_PATTERNS = (
    re.compile(r"(\d{1,3})\s*(?:minutos?|mins?|m)\b"),
    re.compile(r"\+\s*(\d{1,3})\b"),
)


def _offset(target: datetime, now: datetime) -> timedelta:
    """Elapsed time between two instants, correct across DST changes."""
    if target.tzinfo is not None and now.tzinfo is not None:
        return target.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    return target - now


@dataclass(frozen=True)
class EffectiveTime:
    """Absolute target instant and its signed offset from ``now``."""

    target: datetime
    diff: timedelta

    @property
    def diff_ms(self) -> int:
        return self.diff // timedelta(milliseconds=1)


def parse_time(value: Any, now: datetime) -> EffectiveTime | None:
    """Parse a leading H:MM / HH:MM into an instant on ``now``'s date.

    Times more than 12 hours in the past are taken as tomorrow. Times far in
    the future are not pulled back a day.
    """
    if not isinstance(value, str):
        return None
    match = _LEADING_TIME_RE.match(value)
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # Out-of-range digits overflow into the following day.
    target = midnight + timedelta(hours=hours, minutes=minutes)

    diff = _offset(target, now)
    if diff < -ROLLOVER_THRESHOLD:
        target += ONE_DAY
        diff = _offset(target, now)
    return EffectiveTime(target=target, diff=diff)


def time_from_remarks(remarks: Any, now: datetime) -> EffectiveTime | None:
    """Return the first replacement time mentioned anywhere in the remarks."""
    if not isinstance(remarks, str) or not remarks:
        return None
    match = _REMARK_TIME_RE.search(remarks)
    if not match:
        return None
    return parse_time(match.group(1), now)


def delay_minutes_from_remarks(remarks: Any) -> int | None:
    """Extract a delay such as ``12 minutos``, ``5 min`` or ``+5`` from the remarks."""
    if not isinstance(remarks, str) or not remarks:
        return None
    text = remarks.lower()
    for pattern in _DELAY_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def effective_time(row: Any, now: datetime) -> EffectiveTime | None:
    """Resolve the departure instant used for filtering, blinking and display."""
    remarks = getattr(row, "remarks", None)
    replacement = time_from_remarks(remarks, now)
    if replacement is not None:
        return replacement

    nominal = parse_time(getattr(row, "time", None), now)
    if nominal is None:
        return None

    delay = delay_minutes_from_remarks(remarks)
    status = getattr(row, "status", None)
    is_delayed = isinstance(status, str) and status.lower() == ATRASADO
    if delay is not None or is_delayed:
        target = nominal.target + timedelta(minutes=delay or 0)
        return EffectiveTime(target=target, diff=_offset(target, now))

    return nominal


__all__ = [
    "EffectiveTime",
    "parse_time",
    "time_from_remarks",
    "delay_minutes_from_remarks",
    "effective_time",
]
