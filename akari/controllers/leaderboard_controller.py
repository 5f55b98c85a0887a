"""
Controlador de leaderboards - Endpoints de clasificación

Siempre se calculan desde los datos de origen: no hay endpoints que
modifiquen un leaderboard.
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel

from akari.core.dependencies import Database
from akari.models.leaderboard import LeaderboardEntry, PointsLeaderboardEntry
from akari.services.leaderboard_service import LeaderboardService


router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


class LeaderboardResponse(BaseModel):
    """Leaderboard de completions con su alcance"""
    scope: str
    entries: list[LeaderboardEntry]


@router.get("", response_model=list[PointsLeaderboardEntry])
async def get_points_leaderboard(
    db: Database,
    limit: int = Query(100, ge=1, le=500)
):
    """
    Ranking por puntos. Los primeros 10 son elegibles para el reward semanal.
    """
    leaderboard_service = LeaderboardService(db)
    return await leaderboard_service.get_points_leaderboard(limit)


@router.get("/completions", response_model=LeaderboardResponse)
async def get_global_leaderboard(db: Database):
    """Top 10 por tareas completadas en todas las campañas"""
    leaderboard_service = LeaderboardService(db)
    entries = await leaderboard_service.compute_global_leaderboard()

    return LeaderboardResponse(scope="global", entries=entries)


@router.get("/campaigns/{campaign_id}", response_model=LeaderboardResponse)
async def get_campaign_leaderboard(campaign_id: str, db: Database):
    """Top 20 de una campaña"""
    leaderboard_service = LeaderboardService(db)
    entries = await leaderboard_service.compute_campaign_leaderboard(campaign_id)

    return LeaderboardResponse(scope=f"campaign:{campaign_id}", entries=entries)
