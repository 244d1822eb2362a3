"""
MongoDB async connection using Motor driver.
Single client instance for connection pooling.

The indexes created here carry the invariants the services rely on:
one profile per user, one sleep log per (user, day), unique reward ids.
"""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from sleeprewards.core.config import settings
from sleeprewards.core.errors import PersistenceError

logger = logging.getLogger(__name__)

# Module-level singleton client (created once, reused across requests)
_client: AsyncIOMotorClient | None = None


def get_client() -> AsyncIOMotorClient:
    global _client
    if _client is None:
        # tz_aware so stored datetimes come back as UTC-aware values
        _client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
    return _client


def set_client(client) -> None:
    """Swap the shared client (used by tests and scripts)."""
    global _client
    _client = client


def get_database() -> AsyncIOMotorDatabase:
    return get_client()[settings.MONGO_DB_NAME]


async def _prepare(name: str, *indexes) -> AsyncIOMotorCollection:
    """Return collection `name` after creating `indexes` (key, options) on it."""
    collection = get_database()[name]
    try:
        # Idempotent: only creates the index if it doesn't exist
        for keys, options in indexes:
            await collection.create_index(keys, **options)
    except PyMongoError as exc:
        logger.error("Could not prepare %s collection: %s", name, exc)
        raise PersistenceError(f"Failed to prepare {name} collection: {exc}") from exc
    return collection


async def get_profiles_collection() -> AsyncIOMotorCollection:
    """
    FastAPI dependency – yields the profiles collection and
    ensures a unique index on user_id exists.
    """
    return await _prepare("profiles", ("user_id", {"unique": True}))


async def get_sleep_logs_collection() -> AsyncIOMotorCollection:
    """
    FastAPI dependency – yields the sleep_logs collection and
    ensures a unique compound index on (user_id, day).
    """
    # Compound unique index: one sleep log per user per day
    return await _prepare(
        "sleep_logs",
        ([("user_id", 1), ("day", 1)], {"unique": True}),
        ([("user_id", 1), ("created_at", 1)], {}),
    )


async def get_rewards_collection() -> AsyncIOMotorCollection:
    """
    FastAPI dependency – yields the read-only reward catalog and
    ensures a unique index on reward_id.
    """
    return await _prepare("rewards", ("reward_id", {"unique": True}))


async def ensure_indexes() -> None:
    """Create every index up front so the first requests do not race on it."""
    await get_profiles_collection()
    await get_sleep_logs_collection()
    await get_rewards_collection()
