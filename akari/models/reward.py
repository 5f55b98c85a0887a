from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class RewardStatus(str, Enum):
    PENDING_BURN = "pending_burn"
    READY_FOR_PAYOUT = "ready_for_payout"
    PAID = "paid"  # lo marca un administrador fuera de esta API


class Reward(BaseModel):
    """Premio semanal del leaderboard, desbloqueado quemando MYST"""

    id: str = Field(..., alias="_id")
    user_id: str

    usd_amount: float  # confidencial mientras no esté pagado
    required_myst: int  # derivado de usd_amount al crear el reward
    burned_myst: float = 0

    status: RewardStatus = RewardStatus.PENDING_BURN
    ton_wallet: Optional[str] = None

    week_start: Optional[datetime] = None
    rank: Optional[int] = None

    created_at: datetime
    claimed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    class Config:
        populate_by_name = True


class MystTransaction(BaseModel):
    """Entrada del ledger de MYST (positiva = crédito, negativa = quema)"""

    id: str = Field(..., alias="_id")
    user_id: str
    type: str  # admin_grant | reward_burn
    amount: float
    meta: dict = {}
    created_at: datetime

    class Config:
        populate_by_name = True


# ============================================
# Requests / vistas
# ============================================

class RewardClaimRequest(BaseModel):
    reward_id: str = Field(..., alias="rewardId")
    ton_wallet: Optional[str] = Field(None, alias="tonWallet")

    class Config:
        populate_by_name = True


class RewardCreate(BaseModel):
    user_id: str = Field(..., alias="userId")
    usd_amount: float = Field(..., gt=0, alias="usdAmount")
    week_start: Optional[datetime] = Field(None, alias="weekStart")
    rank: Optional[int] = Field(None, ge=1)

    class Config:
        populate_by_name = True


class UnpaidRewardView(BaseModel):
    """Reward sin pagar tal como lo ve el usuario: nunca incluye el monto en USD"""

    id: str
    week_start: Optional[datetime] = Field(None, alias="weekStart")
    rank: Optional[int] = None
    status: RewardStatus
    required_myst: int = Field(..., alias="requiredMyst")
    burned_myst: float = Field(0, alias="burnedMyst")
    ton_wallet: Optional[str] = Field(None, alias="tonWallet")

    class Config:
        populate_by_name = True

    @classmethod
    def from_reward(cls, reward: Reward) -> "UnpaidRewardView":
        return cls(
            id=reward.id,
            week_start=reward.week_start,
            rank=reward.rank,
            status=reward.status,
            required_myst=reward.required_myst,
            burned_myst=reward.burned_myst,
            ton_wallet=reward.ton_wallet,
        )


class PaidRewardView(UnpaidRewardView):
    usd_amount: float = Field(..., alias="usdAmount")
    paid_at: Optional[datetime] = Field(None, alias="paidAt")

    @classmethod
    def from_reward(cls, reward: Reward) -> "PaidRewardView":
        return cls(
            id=reward.id,
            week_start=reward.week_start,
            rank=reward.rank,
            status=reward.status,
            required_myst=reward.required_myst,
            burned_myst=reward.burned_myst,
            ton_wallet=reward.ton_wallet,
            usd_amount=reward.usd_amount,
            paid_at=reward.paid_at,
        )


class RewardList(BaseModel):
    current: list[UnpaidRewardView] = []
    past: list[PaidRewardView] = []
    myst_balance: float = Field(0, alias="mystBalance")

    class Config:
        populate_by_name = True


class ClaimResult(BaseModel):
    burned_myst: float = Field(..., alias="burnedMyst")
    new_balance: float = Field(..., alias="newBalance")
    status: RewardStatus

    class Config:
        populate_by_name = True
