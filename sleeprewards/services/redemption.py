"""
Reward catalog reads and the redemption workflow.

A redemption is one guarded debit on the profile document that also
appends the RedemptionRecord, so the record and the debit are written
together or not at all.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from sleeprewards.core.errors import (
    InsufficientBalance,
    InsufficientPoints,
    PersistenceError,
    RewardNotFound,
)
from sleeprewards.models.reward import RedemptionRecord, RedemptionView, RewardCatalogItem
from sleeprewards.services.ledger import debit, get_balance
from sleeprewards.services.sleep_logs import as_utc

logger = logging.getLogger(__name__)


async def list_catalog(rewards_col: AsyncIOMotorCollection) -> list[RewardCatalogItem]:
    """Catalog ordered by points_cost, cheapest first."""
    try:
        docs = await rewards_col.find({}, {"_id": 0}).sort("points_cost", 1).to_list(length=None)
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read reward catalog: {exc}")
    return [RewardCatalogItem(**d) for d in docs]


async def get_reward(rewards_col: AsyncIOMotorCollection, reward_id: str) -> RewardCatalogItem:
    try:
        doc = await rewards_col.find_one({"reward_id": reward_id}, {"_id": 0})
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read reward: {exc}")
    if not doc:
        raise RewardNotFound(f"Reward '{reward_id}' not found")
    return RewardCatalogItem(**doc)


async def redeem(
    rewards_col: AsyncIOMotorCollection,
    profiles_col: AsyncIOMotorCollection,
    user_id: str,
    reward_id: str,
    *,
    now: Optional[datetime] = None,
) -> tuple[RedemptionRecord, int]:
    """
    Exchange points for a catalog reward. Returns (record, new_balance).

    The balance is re-read right before the debit; the debit's own guard
    still decides if a concurrent redemption got there first.
    """
    reward  = await get_reward(rewards_col, reward_id)
    balance = await get_balance(profiles_col, user_id)
    if balance < reward.points_cost:
        logger.info(
            "redemption rejected uid=%s reward=%s cost=%d balance=%d",
            user_id, reward.reward_id, reward.points_cost, balance,
        )
        raise InsufficientPoints(
            f"Not enough points: {reward.name} costs {reward.points_cost}, balance is {balance}"
        )

    record = RedemptionRecord(
        redemption_id=uuid4().hex,
        reward_id=reward.reward_id,
        reward_name=reward.name,
        points_cost=reward.points_cost,
        redeemed_at=as_utc(now or datetime.now(timezone.utc)),
    )
    try:
        new_balance = await debit(
            profiles_col, user_id, reward.points_cost,
            push={"redemptions": record.model_dump()},
        )
    except InsufficientBalance:
        raise InsufficientPoints(
            f"Not enough points: {reward.name} costs {reward.points_cost}"
        )

    logger.info(
        "redeemed uid=%s reward=%s cost=%d balance=%d",
        user_id, reward.reward_id, reward.points_cost, new_balance,
    )
    return record, new_balance


async def list_redemptions(
    rewards_col: AsyncIOMotorCollection,
    profiles_col: AsyncIOMotorCollection,
    user_id: str,
) -> list[RedemptionView]:
    """Redemption history, newest first, with the catalog icon attached."""
    try:
        profile = await profiles_col.find_one({"user_id": user_id}, {"redemptions": 1})
        records = (profile or {}).get("redemptions") or []
        reward_ids = sorted({r["reward_id"] for r in records})
        icons = {}
        if reward_ids:
            catalog = await rewards_col.find(
                {"reward_id": {"$in": reward_ids}}, {"_id": 0, "reward_id": 1, "icon": 1}
            ).to_list(length=None)
            icons = {c["reward_id"]: c.get("icon") for c in catalog}
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to read redemptions: {exc}")

    views = [
        RedemptionView(**{**r, "redeemed_at": as_utc(r["redeemed_at"]), "icon": icons.get(r["reward_id"])})
        for r in records
    ]
    views.sort(key=lambda v: v.redeemed_at, reverse=True)
    return views
