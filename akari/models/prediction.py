from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class BetDenomination(str, Enum):
    STARS = "stars"    # pagado con Telegram Stars (fuera de esta API)
    POINTS = "points"  # se descuenta del saldo de puntos del usuario


class Prediction(BaseModel):
    """Mercado de predicción con opciones mutuamente excluyentes"""

    id: str = Field(..., alias="_id")
    title: str
    description: Optional[str] = None
    options: list[str]

    entry_fee_stars: int = 0
    entry_fee_points: int = 0

    pot: int = 0  # suma de todas las apuestas

    resolved: bool = False  # unresolved -> resolved (terminal)
    winning_option: Optional[str] = None
    resolved_at: Optional[datetime] = None

    creator_id: str
    ends_at: datetime
    created_at: datetime

    class Config:
        populate_by_name = True


class PredictionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    options: list[str] = Field(..., min_length=2, max_length=10)
    entry_fee_stars: int = Field(0, ge=0)
    entry_fee_points: int = Field(0, ge=0)
    ends_at: datetime

    @field_validator("options")
    @classmethod
    def options_must_be_unique(cls, options: list[str]) -> list[str]:
        cleaned = [o.strip() for o in options]
        if any(not o for o in cleaned):
            raise ValueError("options cannot be empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("options must be unique")
        return cleaned


class Bet(BaseModel):
    """Apuesta de un usuario; inmutable salvo el payout al resolver"""

    id: str = Field(..., alias="_id")
    prediction_id: str
    user_id: str
    option: str
    amount: int
    denomination: BetDenomination

    payout: Optional[int] = None  # se escribe al resolver (solo ganadores)

    created_at: datetime

    class Config:
        populate_by_name = True


class BetCreate(BaseModel):
    option: str
    amount: int = Field(..., gt=0)
    denomination: BetDenomination = BetDenomination.POINTS


class WinnerPayout(BaseModel):
    user_id: str = Field(..., alias="userId")
    bet_id: str = Field(..., alias="betId")
    stake: int
    payout: int

    class Config:
        populate_by_name = True


class Settlement(BaseModel):
    """Resultado de resolver una predicción"""

    payout_pot: int = Field(..., alias="payoutPot")
    house_fee: int = Field(..., alias="houseFee")
    winners: list[WinnerPayout] = []

    class Config:
        populate_by_name = True
