"""
UserRepository - MongoDB access for users collection.

Balances (points, MYST) are only changed through the conditional helpers
below, never by an unconditional write.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from akari.models.user import User, UserCreate


class UserRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["users"]

    # ============================================
    # 📌 READ
    # ============================================

    async def get_by_id(
        self,
        user_id: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[User]:
        """Get user by internal ID."""
        doc = await self.collection.find_one({"_id": user_id}, session=session)
        return User(**doc) if doc else None

    async def get_by_telegram_id(self, telegram_id: str) -> Optional[User]:
        """Get user by Telegram ID."""
        doc = await self.collection.find_one({"telegram_id": telegram_id})
        return User(**doc) if doc else None

    async def get_many(self, user_ids: list[str]) -> dict[str, User]:
        """Batch lookup: one `$in` query for all IDs, keyed by ID."""
        if not user_ids:
            return {}
        cursor = self.collection.find({"_id": {"$in": list(user_ids)}})
        docs = await cursor.to_list(length=None)
        return {doc["_id"]: User(**doc) for doc in docs}

    async def list_ranked_by_points(self, limit: int) -> list[User]:
        """Users with points, highest first (ties by ID)."""
        cursor = self.collection.find({"points": {"$gt": 0}}).sort([
            ("points", -1),
            ("_id", 1)
        ]).limit(limit)
        docs = await cursor.to_list(length=limit)
        return [User(**doc) for doc in docs]

    async def list_points(self) -> list[dict]:
        """{_id, points, tier} of every user."""
        cursor = self.collection.find({}, {"_id": 1, "points": 1, "tier": 1})
        return await cursor.to_list(length=None)

    async def exists(self, user_id: str) -> bool:
        """Check if user exists."""
        doc = await self.collection.find_one({"_id": user_id}, {"_id": 1})
        return doc is not None

    # ============================================
    # 📌 CREATE / UPDATE
    # ============================================

    async def create(self, user_data: UserCreate) -> User:
        """Create a new user with zero balances."""
        now = datetime.now(timezone.utc)

        user_doc = {
            "_id": uuid.uuid4().hex,
            "telegram_id": user_data.telegram_id,
            "username": user_data.username,
            "first_name": user_data.first_name,
            "avatar_url": user_data.avatar_url,
            "points": 0,
            "tier": "Seeker_L1",
            "myst_balance": 0,
            "ton_wallet": None,
            "created_at": now,
            "last_login_at": now,
            "is_active": True,
            "is_admin": user_data.is_admin,
        }

        await self.collection.insert_one(user_doc)
        return User(**user_doc)

    async def update_login(
        self,
        user_id: str,
        username: Optional[str],
        first_name: Optional[str],
        is_admin: bool
    ) -> Optional[User]:
        """Refresh Telegram profile fields and last login timestamp."""
        now = datetime.now(timezone.utc)

        result = await self.collection.find_one_and_update(
            {"_id": user_id},
            {"$set": {
                "last_login_at": now,
                "username": username,
                "first_name": first_name,
                "is_admin": is_admin,
            }},
            return_document=ReturnDocument.AFTER
        )

        return User(**result) if result else None

    # ============================================
    # 💰 BALANCES
    # ============================================

    async def set_points_if_unchanged(
        self,
        user_id: str,
        expected_points: float,
        new_points: float,
        tier: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> bool:
        """
        Write a new points balance together with its tier.

        Conditional on the stored balance still being `expected_points`, so a
        concurrent delta is never overwritten. Returns False when it changed
        (or the user is missing).
        """
        result = await self.collection.update_one(
            {"_id": user_id, "points": expected_points},
            {"$set": {"points": new_points, "tier": tier}},
            session=session
        )
        return result.matched_count == 1

    async def set_tier(
        self,
        user_id: str,
        tier: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> None:
        await self.collection.update_one(
            {"_id": user_id},
            {"$set": {"tier": tier}},
            session=session
        )

    async def increment_myst(
        self,
        user_id: str,
        amount: float,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[float]:
        """Credit MYST. Returns the new balance or None if user is missing."""
        result = await self.collection.find_one_and_update(
            {"_id": user_id},
            {"$inc": {"myst_balance": amount}},
            return_document=ReturnDocument.AFTER,
            session=session
        )
        return result["myst_balance"] if result else None

    async def decrement_myst(
        self,
        user_id: str,
        amount: float,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[float]:
        """
        Burn MYST only if the balance still covers `amount`.

        Returns the new balance, or None when the condition no longer holds
        (concurrent burn) or the user is missing.
        """
        result = await self.collection.find_one_and_update(
            {"_id": user_id, "myst_balance": {"$gte": amount}},
            {"$inc": {"myst_balance": -amount}},
            return_document=ReturnDocument.AFTER,
            session=session
        )
        return result["myst_balance"] if result else None

    async def set_ton_wallet(
        self,
        user_id: str,
        ton_wallet: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> None:
        await self.collection.update_one(
            {"_id": user_id},
            {"$set": {"ton_wallet": ton_wallet}},
            session=session
        )
