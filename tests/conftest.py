# tests/conftest.py
import asyncio

import mongomock
import pytest
import pytest_asyncio

from sleeprewards.core.config import settings
from sleeprewards.db import mongo
from sleeprewards.db.mongo import (
    get_profiles_collection,
    get_rewards_collection,
    get_sleep_logs_collection,
)


class _MongomockCursor:
    def __init__(self, cursor):
        self._cursor = cursor

    def sort(self, key_or_list, direction=None):
        self._cursor = self._cursor.sort(key_or_list, direction)
        return self

    async def to_list(self, length=None):
        await asyncio.sleep(0)
        docs = list(self._cursor)
        return docs if length is None else docs[:length]


class _MongomockCollection:
    """
    Awaitable view of a mongomock collection with the Motor call shapes
    the services use. Every call yields to the event loop first, so
    concurrent tasks interleave between store operations the way they
    do against a real server, while each operation stays atomic.
    """

    def __init__(self, collection):
        self.sync = collection

    def find(self, *args, **kwargs):
        return _MongomockCursor(self.sync.find(*args, **kwargs))

    def __getattr__(self, name):
        method = getattr(self.sync, name)

        async def call(*args, **kwargs):
            await asyncio.sleep(0)
            return method(*args, **kwargs)

        return call


class _MongomockDatabase:
    def __init__(self, database):
        self.sync = database

    def __getitem__(self, name):
        return _MongomockCollection(self.sync[name])


class _MongomockClient:
    def __init__(self):
        self.sync = mongomock.MongoClient()

    def __getitem__(self, name):
        return _MongomockDatabase(self.sync[name])

    def close(self):
        self.sync.close()


@pytest.fixture
def mongo_client():
    """Point the shared client at a fresh in-memory store for one test."""
    client = _MongomockClient()
    mongo.set_client(client)
    yield client
    mongo.set_client(None)


@pytest.fixture
def sync_db(mongo_client):
    """Plain mongomock database for arranging and inspecting state."""
    return mongo_client.sync[settings.MONGO_DB_NAME]


@pytest_asyncio.fixture
async def profiles(mongo_client):
    return await get_profiles_collection()


@pytest_asyncio.fixture
async def sleep_logs(mongo_client):
    return await get_sleep_logs_collection()


@pytest_asyncio.fixture
async def rewards(mongo_client):
    col = await get_rewards_collection()
    col.sync.insert_many([
        {"reward_id": "theme", "name": "Dream Theme", "description": "", "icon": "✨", "points_cost": 50},
        {"reward_id": "sticker", "name": "Sleepy Sticker", "description": "", "icon": "🌙", "points_cost": 15},
        {"reward_id": "sounds", "name": "Sleep Sounds", "description": "", "icon": "🎧", "points_cost": 100},
    ])
    return col
