"""
MystTransactionRepository - append-only MYST ledger.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase

from akari.models.reward import MystTransaction


class MystTransactionRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["myst_transactions"]

    async def record(
        self,
        user_id: str,
        type: str,
        amount: float,
        meta: Optional[dict] = None,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> MystTransaction:
        """Append one ledger row. Burns are stored as negative amounts."""
        entry = MystTransaction(
            _id=uuid.uuid4().hex,
            user_id=user_id,
            type=type,
            amount=amount,
            meta=meta or {},
            created_at=datetime.now(timezone.utc),
        )
        await self.collection.insert_one(entry.model_dump(by_alias=True), session=session)
        return entry
