# Sleep log creation and reads. One log per user per request day.
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from sleeprewards.core.errors import DuplicateLogError, PersistenceError
from sleeprewards.models.sleep_log import LogTotals, SleepLogDocument
from sleeprewards.services.ledger import credit
from sleeprewards.services.scoring import (
    day_key,
    parse_instant,
    points_for_duration,
    sleep_duration_hours,
)

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """BSON dates are UTC; drivers without tz_aware hand them back naive."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_log(doc: dict) -> SleepLogDocument:
    doc = {k: v for k, v in doc.items() if k != "_id"}
    for key in ("sleep_time", "wake_time", "created_at"):
        doc[key] = as_utc(doc[key])
    return SleepLogDocument(**doc)


async def log_sleep(
    logs_col: AsyncIOMotorCollection,
    profiles_col: AsyncIOMotorCollection,
    user_id: str,
    sleep_time,
    wake_time,
    *,
    now: Optional[datetime] = None,
) -> tuple[SleepLogDocument, int]:
    """
    Score a sleep session, store it under today's day bucket and credit
    the points. Returns (log, new_balance).

    The unique (user_id, day) index decides duplicates; the insert is
    attempted directly and a key violation becomes DuplicateLogError.
    """
    sleep_at = parse_instant(sleep_time, "sleep_time")
    wake_at  = parse_instant(wake_time, "wake_time")
    duration = sleep_duration_hours(sleep_at, wake_at)
    points   = points_for_duration(duration)
    now      = as_utc(now or datetime.now(timezone.utc))

    log = SleepLogDocument(
        log_id=uuid4().hex,
        user_id=user_id,
        day=day_key(now),
        sleep_time=sleep_at,
        wake_time=wake_at,
        duration_hours=duration,
        points_earned=points,
        created_at=now,
    )

    try:
        await logs_col.insert_one(log.model_dump())
    except DuplicateKeyError:
        logger.info("duplicate sleep log rejected uid=%s day=%s", user_id, log.day)
        raise DuplicateLogError(
            "Sleep already logged for today. Only one sleep entry per day is allowed."
        )
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to save sleep log: {exc}")

    try:
        balance = await credit(profiles_col, user_id, points)
    except PersistenceError:
        # Undo the insert so the log never exists without its credit.
        try:
            await logs_col.delete_one({"log_id": log.log_id})
        except PyMongoError as exc:
            logger.error("rollback of sleep log %s failed: %s", log.log_id, exc)
        raise

    logger.info(
        "sleep logged uid=%s day=%s hours=%.2f points=%d",
        user_id, log.day, duration, points,
    )
    return log, balance


async def get_today_log(
    logs_col: AsyncIOMotorCollection,
    user_id: str,
    *,
    now: Optional[datetime] = None,
) -> Optional[SleepLogDocument]:
    today = day_key(now or datetime.now(timezone.utc))
    try:
        doc = await logs_col.find_one({"user_id": user_id, "day": today}, {"_id": 0})
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read today's log: {exc}")
    return to_log(doc) if doc else None


async def get_recent_logs(
    logs_col: AsyncIOMotorCollection,
    user_id: str,
    limit: int = 10,
) -> list[SleepLogDocument]:
    """Newest first."""
    try:
        docs = await logs_col.find(
            {"user_id": user_id}, {"_id": 0}
        ).sort("created_at", -1).to_list(length=limit)
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read sleep logs: {exc}")
    return [to_log(d) for d in docs[:limit]]


async def get_log_totals(logs_col: AsyncIOMotorCollection, user_id: str) -> LogTotals:
    try:
        docs = await logs_col.find(
            {"user_id": user_id}, {"duration_hours": 1, "_id": 0}
        ).to_list(length=None)
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read sleep logs: {exc}")
    return LogTotals(
        total_logs=len(docs),
        total_hours=sum(float(d.get("duration_hours") or 0) for d in docs),
    )
