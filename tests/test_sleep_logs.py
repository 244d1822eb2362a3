"""Tests for sleep logging: scoring, the one-log-per-day rule and rollback."""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from sleeprewards.core.errors import DuplicateLogError, PersistenceError, ValidationError
from sleeprewards.services import sleep_logs as sleep_logs_module
from sleeprewards.services.ledger import get_balance
from sleeprewards.services.sleep_logs import (
    get_log_totals,
    get_recent_logs,
    get_today_log,
    log_sleep,
)

NOW = datetime(2024, 1, 2, 8, 30, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_log_sleep_scores_and_credits(sleep_logs, profiles):
    log, balance = await log_sleep(
        sleep_logs, profiles, "u1", "2024-01-01T23:00", "2024-01-02T07:00", now=NOW
    )
    assert log.duration_hours == 8.0
    assert log.points_earned == 20
    assert log.day == "2024-01-02"
    assert balance == 20
    assert await get_balance(profiles, "u1") == 20


@pytest.mark.asyncio
async def test_second_log_same_day_is_rejected(sleep_logs, profiles, sync_db):
    await log_sleep(sleep_logs, profiles, "u1", "2024-01-01T23:00", "2024-01-02T07:00", now=NOW)
    with pytest.raises(DuplicateLogError):
        await log_sleep(
            sleep_logs, profiles, "u1", "2024-01-01T22:00", "2024-01-02T06:00",
            now=NOW + timedelta(hours=10),
        )
    assert sync_db["sleep_logs"].count_documents({"user_id": "u1"}) == 1
    assert await get_balance(profiles, "u1") == 20


@pytest.mark.asyncio
async def test_concurrent_submissions_persist_exactly_one_log(sleep_logs, profiles, sync_db):
    results = await asyncio.gather(
        log_sleep(sleep_logs, profiles, "u1", "2024-01-01T23:00", "2024-01-02T07:00", now=NOW),
        log_sleep(sleep_logs, profiles, "u1", "2024-01-01T23:30", "2024-01-02T06:00", now=NOW),
        return_exceptions=True,
    )
    assert sum(isinstance(r, DuplicateLogError) for r in results) == 1
    assert sync_db["sleep_logs"].count_documents({"user_id": "u1"}) == 1

    stored = sync_db["sleep_logs"].find_one({"user_id": "u1"})
    assert await get_balance(profiles, "u1") == stored["points_earned"]


@pytest.mark.asyncio
async def test_next_day_and_other_users_are_independent(sleep_logs, profiles):
    await log_sleep(sleep_logs, profiles, "u1", "2024-01-01T23:00", "2024-01-02T07:00", now=NOW)
    await log_sleep(sleep_logs, profiles, "u2", "2024-01-01T23:00", "2024-01-02T04:00", now=NOW)
    await log_sleep(
        sleep_logs, profiles, "u1", "2024-01-02T23:00", "2024-01-03T03:00",
        now=NOW + timedelta(days=1),
    )
    assert await get_balance(profiles, "u1") == 25
    assert await get_balance(profiles, "u2") == 5


@pytest.mark.asyncio
async def test_day_bucket_is_request_day_not_sleep_day(sleep_logs, profiles):
    log, _ = await log_sleep(
        sleep_logs, profiles, "u1", "2023-12-20T23:00", "2023-12-21T07:00", now=NOW
    )
    assert log.day == "2024-01-02"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "sleep_time, wake_time",
    [(None, "2024-01-02T07:00"), ("2024-01-01T23:00", ""), ("late", "2024-01-02T07:00")],
)
async def test_invalid_input_writes_nothing(sleep_logs, profiles, sync_db, sleep_time, wake_time):
    with pytest.raises(ValidationError):
        await log_sleep(sleep_logs, profiles, "u1", sleep_time, wake_time, now=NOW)
    assert sync_db["sleep_logs"].count_documents({}) == 0
    assert sync_db["profiles"].count_documents({}) == 0


@pytest.mark.asyncio
async def test_failed_credit_removes_the_log(sleep_logs, profiles, sync_db, monkeypatch):
    async def broken_credit(*args, **kwargs):
        raise PersistenceError("store unavailable")

    monkeypatch.setattr(sleep_logs_module, "credit", broken_credit)
    with pytest.raises(PersistenceError):
        await log_sleep(sleep_logs, profiles, "u1", "2024-01-01T23:00", "2024-01-02T07:00", now=NOW)

    assert sync_db["sleep_logs"].count_documents({}) == 0
    assert await get_balance(profiles, "u1") == 0


@pytest.mark.asyncio
async def test_today_log_lookup(sleep_logs, profiles):
    assert await get_today_log(sleep_logs, "u1", now=NOW) is None
    await log_sleep(sleep_logs, profiles, "u1", "2024-01-02T00:30", "2024-01-02T06:30", now=NOW)

    today = await get_today_log(sleep_logs, "u1", now=NOW + timedelta(hours=3))
    assert today is not None
    assert today.points_earned == 10
    assert today.created_at.tzinfo is not None
    assert await get_today_log(sleep_logs, "u1", now=NOW + timedelta(days=1)) is None


@pytest.mark.asyncio
async def test_recent_logs_and_totals(sleep_logs, profiles):
    for offset, hours in enumerate([6, 8, 9, 11]):
        now = NOW + timedelta(days=offset)
        wake = now - timedelta(hours=1)
        await log_sleep(
            sleep_logs, profiles, "u1",
            (wake - timedelta(hours=hours)).isoformat(), wake.isoformat(), now=now,
        )

    recent = await get_recent_logs(sleep_logs, "u1", limit=3)
    assert [log.duration_hours for log in recent] == [11.0, 9.0, 8.0]

    totals = await get_log_totals(sleep_logs, "u1")
    assert totals.total_logs == 4
    assert totals.total_hours == 34.0
    assert await get_balance(profiles, "u1") == 10 + 20 + 20 + 5
