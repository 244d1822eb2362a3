# Reward routes: browse the catalog, redeem points, redemption history.
from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorCollection

from sleeprewards.db.mongo import get_profiles_collection, get_rewards_collection
from sleeprewards.models.reward import RedemptionResponse, RedemptionView, RewardCatalogItem
from sleeprewards.services.redemption import list_catalog, list_redemptions, redeem

router = APIRouter(prefix="/rewards", tags=["Rewards"])


@router.get("", response_model=list[RewardCatalogItem], summary="Reward catalog, cheapest first")
async def read_catalog(
    rewards_col: AsyncIOMotorCollection = Depends(get_rewards_collection),
):
    return await list_catalog(rewards_col)


@router.get(
    "/redeemed",
    response_model=list[RedemptionView],
    summary="Rewards this user has redeemed, newest first",
)
async def read_redemptions(
    uid: str = Query(..., description="Authenticated user id"),
    rewards_col:  AsyncIOMotorCollection = Depends(get_rewards_collection),
    profiles_col: AsyncIOMotorCollection = Depends(get_profiles_collection),
):
    return await list_redemptions(rewards_col, profiles_col, uid)


@router.post(
    "/{reward_id}/redeem",
    response_model=RedemptionResponse,
    summary="Spend points on a reward",
)
async def redeem_reward(
    reward_id: str,
    uid: str = Query(..., description="Authenticated user id"),
    rewards_col:  AsyncIOMotorCollection = Depends(get_rewards_collection),
    profiles_col: AsyncIOMotorCollection = Depends(get_profiles_collection),
):
    record, balance = await redeem(rewards_col, profiles_col, uid, reward_id)
    return RedemptionResponse(status="redeemed", redemption=record, total_points=balance)
