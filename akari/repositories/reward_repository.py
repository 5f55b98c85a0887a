"""
RewardRepository - MongoDB access for weekly rewards.
"""

from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from akari.models.reward import Reward, RewardStatus


class RewardRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["rewards"]

    async def create(self, reward: Reward) -> Reward:
        doc = reward.model_dump(by_alias=True)
        doc["status"] = reward.status.value
        await self.collection.insert_one(doc)
        return reward

    async def get_by_id(
        self,
        reward_id: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Reward]:
        doc = await self.collection.find_one({"_id": reward_id}, session=session)
        return Reward(**doc) if doc else None

    async def list_for_user(self, user_id: str) -> list[Reward]:
        """All rewards of a user, newest first."""
        cursor = self.collection.find({"user_id": user_id}).sort("created_at", -1)
        docs = await cursor.to_list(length=None)
        return [Reward(**doc) for doc in docs]

    async def mark_claimed(
        self,
        reward_id: str,
        user_id: str,
        burned_myst: float,
        ton_wallet: str,
        claimed_at: datetime,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Reward]:
        """
        pending_burn -> ready_for_payout.

        Conditional on the reward still being pending and owned by `user_id`;
        returns None when another request claimed it first.
        """
        doc = await self.collection.find_one_and_update(
            {
                "_id": reward_id,
                "user_id": user_id,
                "status": RewardStatus.PENDING_BURN.value,
            },
            {"$set": {
                "status": RewardStatus.READY_FOR_PAYOUT.value,
                "burned_myst": burned_myst,
                "ton_wallet": ton_wallet,
                "claimed_at": claimed_at,
            }},
            return_document=ReturnDocument.AFTER,
            session=session
        )
        return Reward(**doc) if doc else None
