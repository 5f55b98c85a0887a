"""
Controlador de rewards - Listado y reclamo con quema de MYST
"""

from fastapi import APIRouter

from akari.core.dependencies import CurrentUser, Database
from akari.models.reward import ClaimResult, RewardClaimRequest, RewardList
from akari.services.myst_service import MystService


router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("", response_model=RewardList)
async def list_rewards(user: CurrentUser, db: Database):
    """
    Rewards del usuario y su saldo de MYST.

    Los rewards sin pagar nunca incluyen el monto en USD.
    """
    service = MystService(db)
    return await service.list_rewards(user.id)


@router.post("/claim", response_model=ClaimResult)
async def claim_reward(
    request: RewardClaimRequest,
    user: CurrentUser,
    db: Database
):
    """
    Reclama un reward quemando MYST.

    Se quema min(saldo, requerido); el reward pasa a ready_for_payout
    aunque la quema sea parcial.
    """
    service = MystService(db)
    return await service.claim_reward_with_burn(user.id, request.reward_id, request.ton_wallet)
