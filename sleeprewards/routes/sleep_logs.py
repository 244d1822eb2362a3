# Sleep log routes: log tonight's sleep, read today's and recent logs.
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorCollection

from sleeprewards.core.config import settings
from sleeprewards.db.mongo import get_profiles_collection, get_sleep_logs_collection
from sleeprewards.models.sleep_log import SleepLogDocument, SleepLogRequest, SleepLogResponse
from sleeprewards.services.sleep_logs import get_recent_logs, get_today_log, log_sleep

router = APIRouter(tags=["Sleep Logs"])


@router.post(
    "/sleep",
    response_model=SleepLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log today's sleep",
)
async def create_sleep_log(
    body: SleepLogRequest,
    uid: str = Query(..., description="Authenticated user id"),
    logs_col:     AsyncIOMotorCollection = Depends(get_sleep_logs_collection),
    profiles_col: AsyncIOMotorCollection = Depends(get_profiles_collection),
):
    log, balance = await log_sleep(
        logs_col, profiles_col, uid, body.sleep_time, body.wake_time
    )
    return SleepLogResponse(status="logged", log=log, total_points=balance)


@router.get("/today", summary="Get today's sleep log")
async def read_today_log(
    uid: str = Query(..., description="Authenticated user id"),
    logs_col: AsyncIOMotorCollection = Depends(get_sleep_logs_collection),
):
    log = await get_today_log(logs_col, uid)
    if log is None:
        return {"user_id": uid, "log": None, "message": "No sleep logged today"}
    return {"user_id": uid, "log": log.model_dump(mode="json")}


@router.get(
    "/recent",
    response_model=list[SleepLogDocument],
    summary="Most recent sleep logs, newest first",
)
async def read_recent_logs(
    uid:   str = Query(..., description="Authenticated user id"),
    limit: int | None = Query(None, ge=1, le=100),
    logs_col: AsyncIOMotorCollection = Depends(get_sleep_logs_collection),
):
    return await get_recent_logs(logs_col, uid, limit=limit or settings.RECENT_LOGS_LIMIT)
