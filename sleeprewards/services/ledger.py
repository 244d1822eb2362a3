"""
Points ledger: the only writer of profiles.total_points.

Every balance change is a single-document atomic update on the profile:
credits are an upserting $inc, debits are an $inc guarded by
`total_points >= points` in the filter, so two racing debits can never
both succeed against a balance that only covers one of them.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from sleeprewards.core.errors import InsufficientBalance, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def _check_amount(points: int) -> None:
    if isinstance(points, bool) or not isinstance(points, int) or points < 0:
        raise ValidationError(f"points must be a non-negative integer, got {points!r}")


async def get_balance(profiles: AsyncIOMotorCollection, user_id: str) -> int:
    """Current balance straight from the store; 0 when the profile is missing."""
    try:
        doc = await profiles.find_one({"user_id": user_id}, {"total_points": 1})
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read balance: {exc}")
    return int((doc or {}).get("total_points") or 0)


async def credit(profiles: AsyncIOMotorCollection, user_id: str, points: int) -> int:
    """Add `points` to the balance and return the new balance."""
    _check_amount(points)
    try:
        doc = await profiles.find_one_and_update(
            {"user_id": user_id},
            {
                "$inc":         {"total_points": points},
                "$setOnInsert": {
                    "email": "",
                    "display_name": "",
                    "redemptions": [],
                    "created_at": datetime.now(timezone.utc),
                },
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to credit points: {exc}")

    balance = int(doc["total_points"])
    logger.info("credit uid=%s +%d -> %d", user_id, points, balance)
    return balance


async def debit(
    profiles: AsyncIOMotorCollection,
    user_id: str,
    points: int,
    *,
    push: Optional[dict] = None,
) -> int:
    """
    Subtract `points` only if the balance covers it; return the new balance.

    `push` maps array fields to documents appended in the same update, so a
    record of what the points were spent on exists iff the debit happened.
    Raises InsufficientBalance (no change) when the guard does not match.
    """
    _check_amount(points)
    update: dict = {"$inc": {"total_points": -points}}
    if push:
        update["$push"] = push

    try:
        doc = await profiles.find_one_and_update(
            {"user_id": user_id, "total_points": {"$gte": points}},
            update,
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to debit points: {exc}")

    if doc is None:
        logger.info("debit rejected uid=%s -%d (insufficient balance)", user_id, points)
        raise InsufficientBalance(f"Balance does not cover {points} points")

    balance = int(doc["total_points"])
    logger.info("debit uid=%s -%d -> %d", user_id, points, balance)
    return balance


async def audit_balance(
    profiles: AsyncIOMotorCollection,
    sleep_logs: AsyncIOMotorCollection,
    user_id: str,
) -> dict:
    """
    Recompute the balance from its sources and compare with the stored one:
    expected = Σ sleep_logs.points_earned − Σ redemptions.points_cost.
    """
    try:
        profile = await profiles.find_one(
            {"user_id": user_id}, {"total_points": 1, "redemptions": 1}
        ) or {}
        logs = await sleep_logs.find(
            {"user_id": user_id}, {"points_earned": 1, "_id": 0}
        ).to_list(length=None)
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to audit balance: {exc}")

    earned   = sum(int(log.get("points_earned") or 0) for log in logs)
    redeemed = sum(int(r.get("points_cost") or 0) for r in profile.get("redemptions") or [])
    balance  = int(profile.get("total_points") or 0)
    expected = earned - redeemed

    if balance != expected:
        logger.warning(
            "ledger drift uid=%s balance=%d expected=%d", user_id, balance, expected
        )
    return {
        "user_id":  user_id,
        "balance":  balance,
        "earned":   earned,
        "redeemed": redeemed,
        "expected": expected,
        "drift":    balance - expected,
    }
