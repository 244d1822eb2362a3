# Weekly summary and points ledger routes.
from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorCollection

from sleeprewards.db.mongo import get_profiles_collection, get_sleep_logs_collection
from sleeprewards.models.profile import BalanceAudit, BalanceResponse
from sleeprewards.models.summary import WeeklySummary
from sleeprewards.services.ledger import audit_balance, get_balance
from sleeprewards.services.weekly import fetch_week_logs, summarize_week

router = APIRouter(tags=["Summary"])


@router.get("/summary/weekly", response_model=WeeklySummary)
async def weekly_summary(
    uid: str = Query(..., description="Authenticated user id"),
    logs_col: AsyncIOMotorCollection = Depends(get_sleep_logs_collection),
):
    """Average duration, best night and points over the trailing 7 days."""
    logs = await fetch_week_logs(logs_col, uid)
    return summarize_week(logs)


@router.get("/points/balance", response_model=BalanceResponse)
async def read_balance(
    uid: str = Query(..., description="Authenticated user id"),
    profiles_col: AsyncIOMotorCollection = Depends(get_profiles_collection),
):
    return BalanceResponse(user_id=uid, total_points=await get_balance(profiles_col, uid))


@router.get("/points/audit", response_model=BalanceAudit)
async def read_balance_audit(
    uid: str = Query(..., description="Authenticated user id"),
    profiles_col: AsyncIOMotorCollection = Depends(get_profiles_collection),
    logs_col:     AsyncIOMotorCollection = Depends(get_sleep_logs_collection),
):
    """Compare the stored balance with earned minus redeemed points."""
    return await audit_balance(profiles_col, logs_col, uid)
