"""
Controlador de predicciones - Mercados, apuestas y resolución
"""

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from akari.core.dependencies import CurrentAdmin, CurrentUser, Database
from akari.models.prediction import Bet, BetCreate, Prediction, PredictionCreate, Settlement
from akari.services.prediction_service import PredictionService


router = APIRouter(prefix="/predictions", tags=["predictions"])


class ResolveRequest(BaseModel):
    """Body del endpoint de resolución (la opción ganadora es la etiqueta)"""
    winning_option: str = Field(..., alias="winningOption")

    class Config:
        populate_by_name = True


@router.get("", response_model=list[Prediction])
async def list_predictions(
    db: Database,
    resolved: bool = Query(False, description="true = resueltas, false = abiertas"),
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0)
):
    """Lista predicciones abiertas (por defecto) o resueltas"""
    service = PredictionService(db)
    return await service.list_predictions(resolved=resolved, limit=limit, skip=skip)


@router.get("/{prediction_id}", response_model=Prediction)
async def get_prediction(prediction_id: str, db: Database):
    service = PredictionService(db)
    return await service.get_prediction(prediction_id)


@router.post("", response_model=Prediction, status_code=status.HTTP_201_CREATED)
async def create_prediction(
    request: PredictionCreate,
    user: CurrentUser,
    db: Database
):
    """Crea una predicción nueva (pot = 0, sin resolver)"""
    service = PredictionService(db)
    return await service.create_prediction(user.id, request)


@router.post("/{prediction_id}/bets", response_model=Bet, status_code=status.HTTP_201_CREATED)
async def place_bet(
    prediction_id: str,
    request: BetCreate,
    user: CurrentUser,
    db: Database
):
    """
    Apuesta en una predicción abierta.

    Una apuesta por usuario. Las apuestas en puntos se descuentan del saldo.
    """
    service = PredictionService(db)
    return await service.place_bet(user.id, prediction_id, request)


@router.post("/{prediction_id}/resolve", response_model=Settlement)
async def resolve_prediction(
    prediction_id: str,
    request: ResolveRequest,
    admin: CurrentAdmin,
    db: Database
):
    """
    Resuelve la predicción y paga a los ganadores.

    Solo administradores. Una predicción se resuelve una sola vez.
    """
    service = PredictionService(db)
    return await service.resolve_prediction(prediction_id, request.winning_option)
