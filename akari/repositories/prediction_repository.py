"""
🎲 PredictionRepository - CRUD para predicciones y apuestas

Maneja dos colecciones: `predictions` y `bets`.
Una apuesta por usuario y predicción.
"""

from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from akari.database import to_mongo_datetime
from akari.models.prediction import Bet, Prediction


class PredictionRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["predictions"]
        self.bets = db["bets"]

    # ============================================
    # 📌 PREDICTIONS
    # ============================================

    async def create(self, prediction: Prediction) -> Prediction:
        await self.collection.insert_one(prediction.model_dump(by_alias=True))
        return prediction

    async def get_by_id(
        self,
        prediction_id: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Prediction]:
        doc = await self.collection.find_one({"_id": prediction_id}, session=session)
        return Prediction(**doc) if doc else None

    async def list_by_status(
        self,
        resolved: bool,
        now: datetime,
        limit: int = 20,
        skip: int = 0
    ) -> list[Prediction]:
        """
        Lista predicciones.

        Las abiertas (resolved=False) solo si todavía no terminaron.
        """
        query: dict = {"resolved": resolved}
        if not resolved:
            query["ends_at"] = {"$gte": to_mongo_datetime(now)}

        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(length=limit)
        return [Prediction(**doc) for doc in docs]

    async def mark_resolved(
        self,
        prediction_id: str,
        winning_option: str,
        resolved_at: datetime,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Prediction]:
        """
        🔒 Transición unresolved -> resolved.

        Condicionada a `resolved: False`: si otra request ya la resolvió
        devuelve None y no escribe nada.
        """
        doc = await self.collection.find_one_and_update(
            {"_id": prediction_id, "resolved": False},
            {"$set": {
                "resolved": True,
                "winning_option": winning_option,
                "resolved_at": resolved_at,
            }},
            return_document=ReturnDocument.AFTER,
            session=session
        )
        return Prediction(**doc) if doc else None

    async def increment_pot(
        self,
        prediction_id: str,
        amount: int,
        now: datetime,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Prediction]:
        """Suma al pot solo si la predicción sigue abierta."""
        doc = await self.collection.find_one_and_update(
            {"_id": prediction_id, "resolved": False, "ends_at": {"$gt": to_mongo_datetime(now)}},
            {"$inc": {"pot": amount}},
            return_document=ReturnDocument.AFTER,
            session=session
        )
        return Prediction(**doc) if doc else None

    # ============================================
    # 📌 BETS
    # ============================================

    async def create_bet(
        self,
        bet: Bet,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Bet:
        doc = bet.model_dump(by_alias=True)
        doc["denomination"] = bet.denomination.value

        try:
            await self.bets.insert_one(doc, session=session)
            return bet
        except DuplicateKeyError:
            raise ValueError(f"Bet for user {bet.user_id} on {bet.prediction_id} already exists")

    async def get_user_bet(self, prediction_id: str, user_id: str) -> Optional[Bet]:
        doc = await self.bets.find_one({"prediction_id": prediction_id, "user_id": user_id})
        return Bet(**doc) if doc else None

    async def get_bets(
        self,
        prediction_id: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> list[Bet]:
        """🔥 Todas las apuestas de una predicción, en orden de llegada"""
        cursor = self.bets.find({"prediction_id": prediction_id}, session=session).sort([
            ("created_at", 1),
            ("_id", 1)
        ])
        docs = await cursor.to_list(length=None)
        return [Bet(**doc) for doc in docs]

    async def set_bet_payout(
        self,
        bet_id: str,
        payout: int,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> None:
        await self.bets.update_one(
            {"_id": bet_id},
            {"$set": {"payout": payout}},
            session=session
        )
