"""
Controlador de Admin - Endpoints exclusivos para administradores
"""

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from akari.core.dependencies import CurrentAdmin, Database
from akari.models.reward import Reward, RewardCreate
from akari.services.myst_service import MystService
from akari.services.points_service import PointsService


router = APIRouter(prefix="/admin", tags=["admin"])


# ============================================
# REQUEST SCHEMAS
# ============================================

class PointsDeltaRequest(BaseModel):
    """Corrección de puntos (positiva o negativa)"""
    delta: float


class GrantMystRequest(BaseModel):
    """Crédito de MYST"""
    amount: float = Field(..., gt=0)


class PointsDeltaResponse(BaseModel):
    points: float
    tier: str


class TierRecalculationResponse(BaseModel):
    users_processed: int
    tiers_changed: int


# ============================================
# PUNTOS Y TIERS
# ============================================

@router.post("/users/{user_id}/points", response_model=PointsDeltaResponse)
async def adjust_user_points(
    user_id: str,
    request: PointsDeltaRequest,
    admin: CurrentAdmin,
    db: Database
):
    """
    Suma (o resta) puntos a un usuario y recalcula su tier.
    Solo administradores.
    """
    points_service = PointsService(db)
    return await points_service.adjust_points(user_id, request.delta)


@router.post("/tiers/recalculate", response_model=TierRecalculationResponse)
async def recalculate_tiers(admin: CurrentAdmin, db: Database):
    """
    Recalcula el tier de todos los usuarios.

    Útil después de cambiar la tabla de bandas.
    """
    points_service = PointsService(db)
    return await points_service.recalculate_all_tiers()


# ============================================
# MYST Y REWARDS
# ============================================

@router.post("/rewards", response_model=Reward, status_code=status.HTTP_201_CREATED)
async def create_reward(
    request: RewardCreate,
    admin: CurrentAdmin,
    db: Database
):
    """
    Crea un reward semanal en pending_burn.

    El MYST requerido se calcula al crearlo a partir del monto en USD.
    """
    myst_service = MystService(db)
    return await myst_service.create_reward(request)


@router.post("/users/{user_id}/myst")
async def grant_myst(
    user_id: str,
    request: GrantMystRequest,
    admin: CurrentAdmin,
    db: Database
):
    """Acredita MYST a un usuario (queda registrado en el ledger)"""
    myst_service = MystService(db)
    return await myst_service.grant_myst(user_id, request.amount)
