"""
Dependencies de FastAPI: sesión del Mini App, admins e inyección de BD
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.core.security import decode_access_token
from akari.database import get_database
from akari.models.user import User
from akari.repositories.user_repository import UserRepository

# El Mini App manda "Authorization: Bearer <token>" con el JWT de /auth/telegram.
# Sin auto_error para responder 401 (y no 403) cuando falta el header.
bearer_scheme = HTTPBearer(auto_error=False)

Database = Annotated[AsyncIOMotorDatabase, Depends(get_database)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    db: Database
) -> User:
    """
    Usuario dueño del token de sesión.

    El token queda atado a la cuenta de Telegram: si el claim `tg` no
    coincide con el usuario guardado, la sesión no vale.
    """
    if credentials is None:
        raise _unauthorized("Falta el token de sesión")

    payload = decode_access_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise _unauthorized("Token inválido o expirado")

    user = await UserRepository(db).get_by_id(payload["sub"])
    if user is None or user.telegram_id != payload.get("tg"):
        raise _unauthorized("Usuario no encontrado")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cuenta deshabilitada",
        )

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_current_admin(user: CurrentUser) -> User:
    """El flag is_admin se fija en el login según ADMIN_TELEGRAM_IDS."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Se requieren permisos de administrador",
        )
    return user


CurrentAdmin = Annotated[User, Depends(get_current_admin)]
