import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field


# ============================================
# TAREAS (union etiquetada por "type")
# ============================================

class _TaskBase(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    title: str
    reward_points: Optional[float] = Field(None, ge=0)  # None -> points_per_completion


class JoinTelegramTask(_TaskBase):
    type: Literal["join_telegram"] = "join_telegram"
    group_id: str = Field(..., min_length=2)  # "@ton_blockchain" o id numérico


class FollowTwitterTask(_TaskBase):
    type: Literal["follow_twitter"] = "follow_twitter"
    username: str = Field(..., pattern=r"^@?[A-Za-z0-9_]{1,15}$")


class RetweetTask(_TaskBase):
    type: Literal["retweet"] = "retweet"
    tweet_id: str = Field(..., pattern=r"^\d+$")


CampaignTask = Annotated[
    Union[JoinTelegramTask, FollowTwitterTask, RetweetTask],
    Field(discriminator="type"),
]


class Campaign(BaseModel):
    id: str = Field(..., alias="_id")
    name: str
    description: Optional[str] = None
    tasks: list[CampaignTask]

    created_by_id: str
    starts_at: datetime
    ends_at: datetime
    is_active: bool = True

    # Cache del leaderboard (solo orientativo, siempre se puede recalcular)
    leaderboard_snapshot: Optional[list[dict]] = None
    leaderboard_updated_at: Optional[datetime] = None

    created_at: datetime

    class Config:
        populate_by_name = True

    def get_task(self, task_id: str):
        return next((t for t in self.tasks if t.id == task_id), None)


class TaskCompletion(BaseModel):
    """Evento de completion: una fila por usuario y tarea"""

    id: str = Field(..., alias="_id")
    campaign_id: str
    task_id: str
    user_id: str
    points: Optional[float] = None  # None -> points_per_completion
    created_at: datetime

    class Config:
        populate_by_name = True


class WizardState(str, Enum):
    """Pasos del asistente, en orden"""

    NAME = "name"
    DESCRIPTION = "description"
    TASKS = "tasks"
    ENDS_AT = "ends_at"
    CONFIRM = "confirm"
    DONE = "done"
    CANCELLED = "cancelled"


class CampaignDraft(BaseModel):
    """Progreso parcial del asistente de creación de campañas"""

    id: str = Field(..., alias="_id")
    user_id: str
    state: WizardState = WizardState.NAME
    name: Optional[str] = None
    description: Optional[str] = None
    tasks: list[CampaignTask] = []
    ends_at: Optional[datetime] = None
    campaign_id: Optional[str] = None  # se llena al confirmar
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True
