# Profile management routes: create and retrieve user profiles.
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from sleeprewards.core.config import settings
from sleeprewards.core.errors import PersistenceError, ProfileNotFound
from sleeprewards.db.mongo import get_profiles_collection, get_sleep_logs_collection
from sleeprewards.models.profile import (
    ProfileCreateRequest,
    ProfileDocument,
    ProfileOverview,
    ProfileResponse,
)
from sleeprewards.services.sleep_logs import get_log_totals, get_recent_logs

router = APIRouter(tags=["Profile"])


@router.post(
    "/create",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create or retrieve a user profile",
)
async def create_profile(
    body: ProfileCreateRequest,
    db: AsyncIOMotorCollection = Depends(get_profiles_collection),
) -> ProfileResponse:
    """
    Creates a new profile with a zero balance or returns the existing one.
    The balance of an existing profile is never reset.
    """
    doc = ProfileDocument(
        user_id=body.user_id,
        email=body.email,
        display_name=body.display_name,
        total_points=0,
        redemptions=[],
        created_at=datetime.now(timezone.utc),
    ).model_dump()
    doc.pop("user_id")

    try:
        result = await db.update_one(
            {"user_id": body.user_id},
            {"$setOnInsert": doc},
            upsert=True,
        )
        stored = await db.find_one({"user_id": body.user_id}, {"_id": 0, "redemptions": 0})
    except PyMongoError as e:
        raise PersistenceError(f"Failed to save profile: {e}")

    return ProfileResponse(
        status="created" if result.upserted_id is not None else "exists",
        user_id=body.user_id,
        email=stored.get("email", ""),
        display_name=stored.get("display_name", ""),
        total_points=int(stored.get("total_points") or 0),
    )


@router.get(
    "/{uid}",
    response_model=ProfileOverview,
    summary="Profile with balance, log totals and recent logs",
)
async def get_profile(
    uid: str,
    profiles: AsyncIOMotorCollection = Depends(get_profiles_collection),
    logs_col: AsyncIOMotorCollection = Depends(get_sleep_logs_collection),
):
    try:
        doc = await profiles.find_one({"user_id": uid}, {"_id": 0, "redemptions": 0})
    except PyMongoError as e:
        raise PersistenceError(f"Failed to read profile: {e}")
    if not doc:
        raise ProfileNotFound("Profile not found. Please complete setup first.")

    return ProfileOverview(
        user_id=uid,
        email=doc.get("email", ""),
        display_name=doc.get("display_name", ""),
        total_points=int(doc.get("total_points") or 0),
        totals=await get_log_totals(logs_col, uid),
        recent_logs=await get_recent_logs(logs_col, uid, limit=settings.RECENT_LOGS_LIMIT),
    )
