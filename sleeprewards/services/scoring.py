# Sleep duration and points scoring.
from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

import pytz

from sleeprewards.core.config import settings
from sleeprewards.core.errors import ValidationError

SECONDS_PER_HOUR = 3600

# (lower, lower_inclusive, upper, upper_inclusive, points), first match wins
SCORING_TIERS: tuple[tuple[float, bool, float, bool, int], ...] = (
    (7.0, True, 9.0,  True,  20),
    (6.0, True, 7.0,  False, 10),
    (9.0, False, 10.0, True, 10),
)
FALLBACK_POINTS = 5


def _in_tier(hours: float, lo: float, lo_inc: bool, hi: float, hi_inc: bool) -> bool:
    above = hours >= lo if lo_inc else hours > lo
    below = hours <= hi if hi_inc else hours < hi
    return above and below


def points_for_duration(hours: float) -> int:
    """
    Step function over sleep hours:
      7–9h → 20, 6–<7h → 10, >9–10h → 10, anything else → 5.
    """
    for lo, lo_inc, hi, hi_inc, points in SCORING_TIERS:
        if _in_tier(hours, lo, lo_inc, hi, hi_inc):
            return points
    return FALLBACK_POINTS


def sleep_duration_hours(sleep_time: datetime, wake_time: datetime) -> float:
    """
    Elapsed hours between the two instants.

    Absolute difference: a wake time earlier than the sleep time still
    yields a positive duration instead of an error.
    """
    return abs((wake_time - sleep_time).total_seconds()) / SECONDS_PER_HOUR


def parse_instant(value: Union[str, datetime, None], field: str, tz_name: str | None = None) -> datetime:
    """
    Parse an ISO-8601 timestamp into a UTC-aware datetime.
    Naive values are read in the day-boundary timezone.
    Raises ValidationError on missing or malformed input.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")

    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 date-time, got {value!r}")

    if parsed.tzinfo is None:
        parsed = pytz.timezone(tz_name or settings.DAY_BOUNDARY_TZ).localize(parsed)
    return parsed.astimezone(timezone.utc)


def day_key(moment: datetime, tz_name: str | None = None) -> str:
    """Calendar day ("YYYY-MM-DD") of `moment` in the day-boundary timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(pytz.timezone(tz_name or settings.DAY_BOUNDARY_TZ))
    return local.date().isoformat()
