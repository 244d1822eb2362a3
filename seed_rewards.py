"""One-off script: upsert the default reward catalog into MongoDB.

Usage:
    python seed_rewards.py

Reads MONGO_URI / MONGO_DB_NAME from the project .env file (same settings the
app uses). Existing rewards keep their reward_id; name, text and cost are
overwritten with the values below.
"""
import asyncio

from sleeprewards.core.config import settings
from sleeprewards.db.mongo import get_client, get_rewards_collection
from sleeprewards.models.reward import RewardCatalogItem

DEFAULT_REWARDS = [
    RewardCatalogItem(reward_id="sleep-sticker", name="Sleepy Sticker",
                      description="A digital sticker for your collection", icon="🌙", points_cost=15),
    RewardCatalogItem(reward_id="dream-theme", name="Dream Theme",
                      description="Unlock the midnight colour theme", icon="✨", points_cost=50),
    RewardCatalogItem(reward_id="sleep-sounds", name="Sleep Sounds Pack",
                      description="Rain, waves and white-noise tracks", icon="🎧", points_cost=100),
    RewardCatalogItem(reward_id="coffee-voucher", name="Morning Coffee",
                      description="Voucher for one coffee at a partner café", icon="☕", points_cost=200),
]


async def main():
    print(f"Connecting to: {settings.MONGO_URI[:40]}...")
    col = await get_rewards_collection()
    for reward in DEFAULT_REWARDS:
        result = await col.update_one(
            {"reward_id": reward.reward_id},
            {"$set": reward.model_dump()},
            upsert=True,
        )
        action = "inserted" if result.upserted_id is not None else "updated"
        print(f"{action:>8}  {reward.reward_id:<16} {reward.points_cost:>4} pts")
    get_client().close()


if __name__ == "__main__":
    asyncio.run(main())
