"""
Controlador de autenticación - Login con Telegram y usuario actual
"""

from fastapi import APIRouter
from pydantic import BaseModel

from akari.core.dependencies import Database, CurrentUser
from akari.services.auth_service import AuthService
from akari.models.user import UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])

# Cuerpo de la request: el initData crudo del WebApp
class TelegramAuthRequest(BaseModel):
    init_data: str

# Respuesta con JWT
class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


@router.post("/telegram", response_model=AuthResponse)
async def authenticate_telegram(
    request: TelegramAuthRequest,
    db: Database
):
    """
    Autentica mediante Telegram WebApp.

    El frontend envía `Telegram.WebApp.initData`, el backend verifica la
    firma, crea o busca el usuario y devuelve un JWT.
    """
    auth_service = AuthService(db)
    user, token = await auth_service.authenticate_with_telegram(request.init_data)

    return AuthResponse(
        access_token=token,
        user=UserResponse.from_user(user)
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user(user: CurrentUser):
    """
    Devuelve el usuario autenticado con sus saldos (puntos, tier, MYST).

    Requiere un JWT válido en la cabecera `Authorization`.
    """
    return UserResponse.from_user(user)
