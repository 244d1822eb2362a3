# Rolling 7-day sleep summary.
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import pytz
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from sleeprewards.core.config import settings
from sleeprewards.core.errors import PersistenceError
from sleeprewards.models.sleep_log import SleepLogDocument
from sleeprewards.models.summary import NightPoint, WeeklySummary
from sleeprewards.services.sleep_logs import to_log


# English names regardless of the host locale.
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def summarize_week(logs: Iterable[SleepLogDocument], tz_name: str | None = None) -> WeeklySummary:
    """
    Reduce logs (ascending by created_at) to the weekly stats.
    Best night is the strictly longest one with more than zero hours,
    so the earliest wins a tie and an all-zero week has no best day.
    """
    tz = pytz.timezone(tz_name or settings.DAY_BOUNDARY_TZ)
    logs = list(logs)

    best: Optional[SleepLogDocument] = None
    for log in logs:
        if log.duration_hours > (best.duration_hours if best else 0.0):
            best = log

    nights = []
    for log in logs:
        local = log.created_at.astimezone(tz)
        nights.append(NightPoint(date=f"{MONTH_ABBR[local.month - 1]} {local.day}", hours=log.duration_hours))

    best_day = None
    if best is not None:
        best_day = WEEKDAY_NAMES[best.created_at.astimezone(tz).weekday()]

    return WeeklySummary(
        log_count=len(logs),
        average_duration=sum(log.duration_hours for log in logs) / len(logs) if logs else 0.0,
        best_day=best_day,
        best_duration=best.duration_hours if best else 0.0,
        total_points=sum(log.points_earned for log in logs),
        nights=nights,
    )


async def fetch_week_logs(
    logs_col: AsyncIOMotorCollection,
    user_id: str,
    *,
    now: Optional[datetime] = None,
    days: int | None = None,
) -> list[SleepLogDocument]:
    """Logs created within the trailing window (boundary inclusive), oldest first."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    since = now - timedelta(days=days or settings.WEEKLY_WINDOW_DAYS)

    try:
        docs = await logs_col.find(
            {"user_id": user_id, "created_at": {"$gte": since}},
            {"_id": 0},
        ).sort("created_at", 1).to_list(length=None)
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read weekly logs: {exc}")
    return [to_log(d) for d in docs]
