"""
📣 CampaignRepository - CRUD para campañas y completions de tareas
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from akari.database import to_mongo_datetime
from akari.models.campaign import Campaign, TaskCompletion


class CampaignRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["campaigns"]
        self.completions = db["task_completions"]

    # ============================================
    # 📌 CAMPAIGNS
    # ============================================

    async def create(self, campaign: Campaign) -> Campaign:
        await self.collection.insert_one(campaign.model_dump(by_alias=True))
        return campaign

    async def get_by_id(self, campaign_id: str) -> Optional[Campaign]:
        doc = await self.collection.find_one({"_id": campaign_id})
        return Campaign(**doc) if doc else None

    async def list_active(self, now: datetime, limit: int = 50) -> list[Campaign]:
        """Campañas activas que todavía no terminaron"""
        cursor = self.collection.find({
            "is_active": True,
            "ends_at": {"$gte": to_mongo_datetime(now)}
        }).sort("created_at", -1).limit(limit)
        docs = await cursor.to_list(length=limit)
        return [Campaign(**doc) for doc in docs]

    async def save_leaderboard_snapshot(
        self,
        campaign_id: str,
        snapshot: list[dict],
        updated_at: datetime
    ) -> None:
        await self.collection.update_one(
            {"_id": campaign_id},
            {"$set": {
                "leaderboard_snapshot": snapshot,
                "leaderboard_updated_at": updated_at,
            }}
        )

    # ============================================
    # 📌 COMPLETIONS
    # ============================================

    async def record_completion(
        self,
        campaign_id: str,
        task_id: str,
        user_id: str,
        points: float,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> TaskCompletion:
        """Registra una completion. Lanza ValueError si ya existía."""
        completion = TaskCompletion(
            _id=uuid.uuid4().hex,
            campaign_id=campaign_id,
            task_id=task_id,
            user_id=user_id,
            points=points,
            created_at=datetime.now(timezone.utc),
        )

        try:
            await self.completions.insert_one(completion.model_dump(by_alias=True), session=session)
            return completion
        except DuplicateKeyError:
            raise ValueError(f"Task {task_id} already completed by user {user_id}")

    async def get_completion(
        self,
        campaign_id: str,
        task_id: str,
        user_id: str
    ) -> Optional[TaskCompletion]:
        doc = await self.completions.find_one({
            "campaign_id": campaign_id,
            "task_id": task_id,
            "user_id": user_id
        })
        return TaskCompletion(**doc) if doc else None

    async def list_completions(self, campaign_id: Optional[str] = None) -> list[TaskCompletion]:
        """Completions de una campaña, o de todas si campaign_id es None"""
        query = {"campaign_id": campaign_id} if campaign_id else {}
        cursor = self.completions.find(query)
        docs = await cursor.to_list(length=None)
        return [TaskCompletion(**doc) for doc in docs]

    async def list_user_completions(self, campaign_id: str, user_id: str) -> list[str]:
        """IDs de tareas completadas por el usuario en la campaña"""
        cursor = self.completions.find(
            {"campaign_id": campaign_id, "user_id": user_id},
            {"task_id": 1}
        )
        docs = await cursor.to_list(length=None)
        return [doc["task_id"] for doc in docs]
