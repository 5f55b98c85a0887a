from typing import Optional
from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    """Entrada en una tabla de clasificación (resultado agregado)"""

    rank: int
    user_id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    tier: Optional[str] = None

    score: float
    completions: int = 0

    scope: str  # global | campaign:<id> | points

    class Config:
        populate_by_name = True


class PointsLeaderboardEntry(BaseModel):
    """Entrada del ranking por puntos (aXP)"""

    rank: int
    user_id: str
    username: Optional[str] = None
    tier: Optional[str] = None
    points: float
    reward_eligible: bool = False
