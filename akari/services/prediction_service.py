"""
Servicio de Predicciones - Mercados, apuestas y liquidación del pot
"""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.core.config import get_settings
from akari.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from akari.database import start_transaction, to_mongo_datetime
from akari.models.prediction import (
    Bet,
    BetCreate,
    BetDenomination,
    Prediction,
    PredictionCreate,
    Settlement,
    WinnerPayout,
)
from akari.repositories.prediction_repository import PredictionRepository
from akari.repositories.user_repository import UserRepository
from akari.services.points_service import PointsService

logger = logging.getLogger(__name__)


def compute_payouts(
    pot: int,
    fee_rate: float,
    bets: Iterable[Bet],
    winning_option: str
) -> Settlement:
    """
    Reparto proporcional del pot entre las apuestas ganadoras.

    - house_fee = floor(pot × fee_rate)
    - payout_pot = pot - house_fee
    - cada apuesta ganadora recibe floor(stake × payout_pot / total ganador)

    Sin apuestas ganadoras no se reparte nada. El resto que deja el
    redondeo hacia abajo se queda en la casa.
    """
    house_fee = int(Decimal(str(fee_rate)) * Decimal(pot))
    payout_pot = pot - house_fee

    winning_bets = [bet for bet in bets if bet.option == winning_option]
    total_winning = sum(bet.amount for bet in winning_bets)

    winners: List[WinnerPayout] = []
    if total_winning > 0:
        for bet in winning_bets:
            winners.append(WinnerPayout(
                user_id=bet.user_id,
                bet_id=bet.id,
                stake=bet.amount,
                payout=bet.amount * payout_pot // total_winning
            ))

    return Settlement(payout_pot=payout_pot, house_fee=house_fee, winners=winners)


class PredictionService:
    """
    Mercados de predicción.

    Ciclo de vida: se crea sin resolver con pot = 0, acumula apuestas
    mientras está abierta y se resuelve una sola vez (estado terminal).
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = PredictionRepository(db)
        self.user_repo = UserRepository(db)
        self.points = PointsService(db)

    async def create_prediction(self, creator_id: str, data: PredictionCreate) -> Prediction:
        now = datetime.now(timezone.utc)
        ends_at = to_mongo_datetime(data.ends_at)

        if ends_at <= to_mongo_datetime(now):
            raise InvalidArgumentError("ends_at must be in the future")

        prediction = Prediction(
            _id=uuid.uuid4().hex,
            title=data.title,
            description=data.description,
            options=data.options,
            entry_fee_stars=data.entry_fee_stars,
            entry_fee_points=data.entry_fee_points,
            pot=0,
            resolved=False,
            creator_id=creator_id,
            ends_at=ends_at,
            created_at=now,
        )

        await self.repo.create(prediction)
        logger.info(f"🎲 Prediction {prediction.id} created by {creator_id}")
        return prediction

    async def get_prediction(self, prediction_id: str) -> Prediction:
        prediction = await self.repo.get_by_id(prediction_id)
        if prediction is None:
            raise NotFoundError(f"Prediction {prediction_id} not found")
        return prediction

    async def list_predictions(
        self,
        resolved: bool = False,
        limit: int = 20,
        skip: int = 0
    ) -> List[Prediction]:
        return await self.repo.list_by_status(
            resolved=resolved,
            now=datetime.now(timezone.utc),
            limit=limit,
            skip=skip
        )

    async def place_bet(self, user_id: str, prediction_id: str, data: BetCreate) -> Bet:
        """
        Registrar la apuesta de un usuario.

        Validaciones (antes de escribir nada):
        1. La predicción existe, no está resuelta y no terminó
        2. La opción es una de las configuradas
        3. El monto es positivo y cubre la entrada
        4. El usuario no apostó antes en esta predicción
        5. Para apuestas en puntos, el saldo alcanza

        Después, en una transacción: pot (condicional), débito de puntos y apuesta.
        """
        now = datetime.now(timezone.utc)
        prediction = await self.get_prediction(prediction_id)

        if prediction.resolved:
            raise InvalidStateError("Prediction is already resolved")
        if to_mongo_datetime(prediction.ends_at) <= to_mongo_datetime(now):
            raise InvalidStateError("Prediction has ended")

        if data.option not in prediction.options:
            raise InvalidArgumentError(f"Unknown option '{data.option}'")

        entry_fee = (
            prediction.entry_fee_points
            if data.denomination == BetDenomination.POINTS
            else prediction.entry_fee_stars
        )
        if data.amount <= 0 or data.amount < entry_fee:
            raise InvalidArgumentError(f"Stake must be positive and at least {entry_fee}")

        if await self.repo.get_user_bet(prediction_id, user_id):
            raise InvalidStateError("User already placed a bet on this prediction")

        if data.denomination == BetDenomination.POINTS:
            user = await self.user_repo.get_by_id(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            if user.points < data.amount:
                raise InvalidStateError("Insufficient points balance")

        bet = Bet(
            _id=uuid.uuid4().hex,
            prediction_id=prediction_id,
            user_id=user_id,
            option=data.option,
            amount=data.amount,
            denomination=data.denomination,
            created_at=now,
        )

        async with start_transaction(self.db) as session:
            # Primero la escritura condicional: si se resolvió o cerró, no se debita nada
            updated = await self.repo.increment_pot(prediction_id, data.amount, now, session=session)
            if updated is None:
                raise InvalidStateError("Prediction is closed")

            if data.denomination == BetDenomination.POINTS:
                await self.points.apply_points_delta(user_id, -data.amount, session=session)

            try:
                await self.repo.create_bet(bet, session=session)
            except ValueError as e:
                raise InvalidStateError(str(e))

        logger.info(f"🎯 Bet {bet.id}: {data.amount} {data.denomination.value} on '{data.option}' ({prediction_id})")
        return bet

    async def resolve_prediction(self, prediction_id: str, winning_option: str) -> Settlement:
        """
        Resolver una predicción y pagar a los ganadores.

        1. Chequea precondiciones (existe, sin resolver, opción válida)
        2. En una transacción:
           - marca resolved=True (condicional: si otra request ganó, falla)
           - acredita cada payout en el ledger de puntos
           - guarda el payout en cada apuesta ganadora

        Raises:
            NotFoundError, InvalidStateError, InvalidArgumentError
        """
        prediction = await self.get_prediction(prediction_id)

        if prediction.resolved:
            raise InvalidStateError("Prediction is already resolved")
        if winning_option not in prediction.options:
            raise InvalidArgumentError(f"Invalid winning option '{winning_option}'")

        fee_rate = get_settings().prediction_fee_rate
        now = datetime.now(timezone.utc)

        async with start_transaction(self.db) as session:
            resolved = await self.repo.mark_resolved(
                prediction_id, winning_option, now, session=session
            )
            if resolved is None:
                raise InvalidStateError("Prediction is already resolved")

            bets = await self.repo.get_bets(prediction_id, session=session)
            settlement = compute_payouts(resolved.pot, fee_rate, bets, winning_option)

            for winner in settlement.winners:
                if winner.payout > 0:
                    await self.points.apply_points_delta(
                        winner.user_id, winner.payout, session=session
                    )
                await self.repo.set_bet_payout(winner.bet_id, winner.payout, session=session)

        logger.info(
            f"✅ Prediction {prediction_id} resolved to '{winning_option}': "
            f"pot {resolved.pot}, fee {settlement.house_fee}, {len(settlement.winners)} winners"
        )
        return settlement
