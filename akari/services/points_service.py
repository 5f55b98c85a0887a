"""
Servicio de Puntos - Ledger de puntos (aXP) y tiers
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase

from akari.core.errors import InternalError, InvalidStateError, NotFoundError
from akari.database import start_transaction
from akari.models.tier import tier_for_points
from akari.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Los saldos se guardan redondeados a centésimas
POINTS_QUANTUM = Decimal("0.01")
MAX_WRITE_ATTEMPTS = 5


def add_points(balance: float, delta: float) -> Decimal:
    """
    Suma exacta de saldo y delta.

    Se opera en Decimal a partir de la representación corta de cada float,
    así 0.1 + 0.2 + 0.3 da 0.6 en cualquier orden.
    """
    return (Decimal(str(balance)) + Decimal(str(delta))).quantize(POINTS_QUANTUM)


class PointsService:
    """
    Ledger de puntos de los usuarios.

    Los puntos solo cambian con `apply_points_delta`, que además recalcula
    el tier en la misma escritura. Los deltas pueden ser fraccionarios
    (0.2 por micro-task) y el saldo nunca queda negativo.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.user_repo = UserRepository(db)

    async def apply_points_delta(
        self,
        user_id: str,
        delta: float,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> float:
        """
        Suma `delta` al saldo y persiste el tier nuevo.

        Pasar `session` cuando se llama dentro de una transacción mayor
        (resolución, completion, apuesta) para que todo se confirme junto.

        La escritura es condicional al saldo leído: si otro delta llegó en el
        medio se vuelve a leer y a sumar.

        Returns:
            Saldo nuevo

        Raises:
            NotFoundError: el usuario no existe
            InvalidStateError: un delta negativo dejaría el saldo negativo
            InternalError: el saldo cambió en cada intento
        """
        for _ in range(MAX_WRITE_ATTEMPTS):
            user = await self.user_repo.get_by_id(user_id, session=session)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")

            new_points = add_points(user.points, delta)
            if new_points < 0:
                raise InvalidStateError(
                    f"Insufficient points: balance {user.points}, delta {delta}"
                )

            tier = tier_for_points(new_points)
            written = await self.user_repo.set_points_if_unchanged(
                user_id, user.points, float(new_points), tier.key, session=session
            )
            if written:
                logger.info(f"Points delta {delta:+} for user {user_id}: balance {new_points}, tier {tier.key}")
                return float(new_points)

        raise InternalError(f"Points balance of {user_id} kept changing, delta {delta} not applied")

    async def adjust_points(self, user_id: str, delta: float) -> Dict[str, Any]:
        """Corrección administrativa en su propia transacción"""
        async with start_transaction(self.db) as session:
            points = await self.apply_points_delta(user_id, delta, session=session)

        return {
            "points": points,
            "tier": tier_for_points(points).key
        }

    async def recalculate_all_tiers(self) -> Dict[str, int]:
        """
        Recalcular el tier de todos los usuarios.

        Mantenimiento: corrige tiers que hayan quedado desfasados
        (p. ej. después de cambiar la tabla de bandas).

        Returns:
            Dict con usuarios procesados y tiers cambiados
        """
        users_processed = 0
        tiers_changed = 0

        for doc in await self.user_repo.list_points():
            users_processed += 1
            tier = tier_for_points(doc.get("points", 0)).key

            if tier != doc.get("tier"):
                await self.user_repo.set_tier(doc["_id"], tier)
                tiers_changed += 1

        logger.info(f"Tier recalculation: {users_processed} users, {tiers_changed} changed")

        return {
            "users_processed": users_processed,
            "tiers_changed": tiers_changed
        }
