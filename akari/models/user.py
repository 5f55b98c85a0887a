from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    id: str = Field(..., alias="_id")
    telegram_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    avatar_url: Optional[str] = None

    # Saldos: solo cambian por incrementos/decrementos explícitos
    points: float = 0
    tier: str = "Seeker_L1"
    myst_balance: float = 0

    ton_wallet: Optional[str] = None

    created_at: datetime
    last_login_at: Optional[datetime] = None

    is_active: bool = True
    is_admin: bool = False

    class Config:
        populate_by_name = True


class UserCreate(BaseModel):
    """Datos que llegan del initData de Telegram"""

    telegram_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_admin: bool = False


class UserResponse(BaseModel):
    """Perfil público del usuario autenticado"""

    id: str
    telegram_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    avatar_url: Optional[str] = None
    points: float
    tier: str
    myst_balance: float
    ton_wallet: Optional[str] = None
    created_at: datetime
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            telegram_id=user.telegram_id,
            username=user.username,
            first_name=user.first_name,
            avatar_url=user.avatar_url,
            points=user.points,
            tier=user.tier,
            myst_balance=user.myst_balance,
            ton_wallet=user.ton_wallet,
            created_at=user.created_at,
            is_admin=user.is_admin,
        )
