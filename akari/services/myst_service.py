"""
Servicio MYST - Quema de MYST para desbloquear rewards semanales
"""

import logging
import math
import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.core.config import get_settings
from akari.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from akari.database import start_transaction
from akari.models.reward import (
    ClaimResult,
    PaidRewardView,
    Reward,
    RewardCreate,
    RewardList,
    RewardStatus,
    UnpaidRewardView,
)
from akari.repositories.myst_transaction_repository import MystTransactionRepository
from akari.repositories.reward_repository import RewardRepository
from akari.repositories.user_repository import UserRepository
from akari.services.notifier import TelegramNotifier

logger = logging.getLogger(__name__)

# Raw (workchain:hex) o user-friendly (48 caracteres base64url)
TON_ADDRESS_RE = re.compile(r"^(?:-?\d+:[0-9a-fA-F]{64}|[A-Za-z0-9_-]{48})$")


def calculate_required_burn(usd_amount: float) -> int:
    """MYST a quemar para un reward de `usd_amount` USD (redondeo hacia arriba)"""
    rate = get_settings().myst_per_usd
    return math.ceil(Decimal(str(usd_amount)) * rate)


def compute_burn_amount(balance: float, required: float) -> float:
    """
    Cuánto MYST se quema al reclamar.

    min(balance, required), pero con saldo positivo siempre al menos 1
    (o todo el saldo si es menor que 1). Con saldo 0 no se quema nada.
    """
    if balance <= 0:
        return 0
    return max(min(balance, required), min(balance, 1))


def is_valid_ton_address(address: str) -> bool:
    return bool(TON_ADDRESS_RE.match(address))


class MystService:
    def __init__(self, db: AsyncIOMotorDatabase, notifier: Optional[TelegramNotifier] = None):
        self.db = db
        self.reward_repo = RewardRepository(db)
        self.user_repo = UserRepository(db)
        self.ledger = MystTransactionRepository(db)
        self.notifier = notifier or TelegramNotifier()

    # ============================================
    # 🔥 CLAIM
    # ============================================

    async def claim_reward_with_burn(
        self,
        user_id: str,
        reward_id: str,
        payout_address: Optional[str] = None
    ) -> ClaimResult:
        """
        Quemar MYST y pasar el reward a ready_for_payout.

        Se acepta la quema parcial: si el saldo no llega al requerido se
        quema todo lo que hay y el reward igual queda listo para pago.

        Raises:
            NotFoundError: el reward no existe o no es del usuario
            InvalidStateError: el reward no está en pending_burn, o no hay MYST
            InvalidArgumentError: dirección TON mal formada
        """
        reward = await self.reward_repo.get_by_id(reward_id)
        if reward is None or reward.user_id != user_id:
            raise NotFoundError(f"Reward {reward_id} not found")

        if reward.status != RewardStatus.PENDING_BURN:
            raise InvalidStateError(f"Reward is {reward.status.value}, not pending_burn")

        if payout_address is not None:
            payout_address = payout_address.strip()
            if not is_valid_ton_address(payout_address):
                raise InvalidArgumentError("Malformed TON wallet address")

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        if user.myst_balance <= 0:
            raise InvalidStateError("No MYST balance to burn")

        ton_wallet = payout_address or user.ton_wallet
        now = datetime.now(timezone.utc)

        async with start_transaction(self.db) as session:
            # El monto se calcula con el saldo actual, no con el del pre-chequeo
            current = await self.user_repo.get_by_id(user_id, session=session)
            if current is None or current.myst_balance <= 0:
                raise InvalidStateError("No MYST balance to burn")
            burn = compute_burn_amount(current.myst_balance, reward.required_myst)

            claimed = await self.reward_repo.mark_claimed(
                reward_id, user_id, burn, ton_wallet, now, session=session
            )
            if claimed is None:
                raise InvalidStateError("Reward was already claimed")

            new_balance = await self.user_repo.decrement_myst(user_id, burn, session=session)
            if new_balance is None:
                raise InvalidStateError("MYST balance changed during claim")

            await self.ledger.record(
                user_id,
                "reward_burn",
                -burn,
                meta={"rewardId": reward_id, "requiredMyst": reward.required_myst},
                session=session
            )

            if payout_address:
                await self.user_repo.set_ton_wallet(user_id, payout_address, session=session)

        logger.info(f"🔥 Reward {reward_id} claimed by {user_id}: burned {burn}/{reward.required_myst} MYST")

        # Fuera de la transacción: Telegram nunca bloquea la escritura
        await self.notifier.send_message(
            user.telegram_id,
            f"🔥 You burned {burn} MYST. Your reward is now ready for payout."
        )

        return ClaimResult(
            burned_myst=burn,
            new_balance=new_balance,
            status=claimed.status
        )

    # ============================================
    # 📋 LIST
    # ============================================

    async def list_rewards(self, user_id: str) -> RewardList:
        """
        Rewards del usuario separados en actuales (sin pagar) y pasados.

        Los actuales se devuelven como UnpaidRewardView, que no tiene campo
        de monto en USD.
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        rewards = await self.reward_repo.list_for_user(user_id)

        return RewardList(
            current=[
                UnpaidRewardView.from_reward(r) for r in rewards
                if r.status != RewardStatus.PAID
            ],
            past=[
                PaidRewardView.from_reward(r) for r in rewards
                if r.status == RewardStatus.PAID
            ],
            myst_balance=user.myst_balance
        )

    # ============================================
    # 🛠️ ADMIN
    # ============================================

    async def create_reward(self, data: RewardCreate) -> Reward:
        if not await self.user_repo.exists(data.user_id):
            raise NotFoundError(f"User {data.user_id} not found")

        reward = Reward(
            _id=uuid.uuid4().hex,
            user_id=data.user_id,
            usd_amount=data.usd_amount,
            required_myst=calculate_required_burn(data.usd_amount),
            burned_myst=0,
            status=RewardStatus.PENDING_BURN,
            week_start=data.week_start,
            rank=data.rank,
            created_at=datetime.now(timezone.utc),
        )

        await self.reward_repo.create(reward)
        logger.info(f"🏆 Reward {reward.id} created for {data.user_id}: {reward.required_myst} MYST to burn")
        return reward

    async def grant_myst(self, user_id: str, amount: float) -> Dict[str, Any]:
        """Acreditar MYST (corrección administrativa) con su entrada en el ledger"""
        if amount <= 0:
            raise InvalidArgumentError("Amount must be positive")

        async with start_transaction(self.db) as session:
            new_balance = await self.user_repo.increment_myst(user_id, amount, session=session)
            if new_balance is None:
                raise NotFoundError(f"User {user_id} not found")

            await self.ledger.record(user_id, "admin_grant", amount, session=session)

        logger.info(f"💎 Granted {amount} MYST to {user_id}: balance {new_balance}")
        return {"mystBalance": new_balance}
