"""
Controlador de salud - Estado de la API y de MongoDB
"""

from fastapi import APIRouter
from pydantic import BaseModel

from akari.database import Database


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Respuesta del chequeo de estado."""
    status: str
    database: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Comprueba que la API responde y si hay conexión a MongoDB.

    Con la base desconectada la API sigue respondiendo "ok": el cliente
    decide qué hacer con `database`.
    """
    db_status = "connected" if Database.db is not None else "disconnected"

    return HealthResponse(
        status="ok",
        database=db_status
    )
