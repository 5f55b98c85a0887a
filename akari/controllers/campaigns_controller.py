"""
Controlador de campañas - Listado, completions y asistente de creación
"""

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from akari.core.dependencies import CurrentUser, Database
from akari.models.campaign import Campaign
from akari.services.campaign_service import CampaignService
from akari.services.campaign_wizard import CampaignWizard


router = APIRouter(prefix="/campaigns", tags=["campaigns"])


class WizardInputRequest(BaseModel):
    """Texto que el usuario responde al paso actual"""
    text: str


class CompletionResponse(BaseModel):
    taskId: str
    pointsAwarded: float
    points: float


# ============================================
# ASISTENTE DE CREACIÓN
# ============================================

@router.post("/drafts", status_code=status.HTTP_201_CREATED)
async def start_campaign_draft(user: CurrentUser, db: Database):
    """Empieza el asistente. Devuelve el borrador y la primera pregunta."""
    wizard = CampaignWizard(db)
    draft = await wizard.start(user.id)
    return wizard.describe(draft)


@router.post("/drafts/{draft_id}/input")
async def submit_campaign_draft_input(
    draft_id: str,
    request: WizardInputRequest,
    user: CurrentUser,
    db: Database
):
    """
    Responde el paso actual del asistente.

    Si la respuesta no es válida devuelve 400 y el paso no cambia.
    """
    wizard = CampaignWizard(db)
    draft = await wizard.submit(user.id, draft_id, request.text)
    return wizard.describe(draft)


# ============================================
# CAMPAÑAS
# ============================================

@router.get("", response_model=list[Campaign])
async def list_campaigns(
    db: Database,
    limit: int = Query(50, ge=1, le=100)
):
    """Campañas activas"""
    service = CampaignService(db)
    return await service.list_active_campaigns(limit)


@router.get("/{campaign_id}", response_model=Campaign)
async def get_campaign(campaign_id: str, db: Database):
    service = CampaignService(db)
    return await service.get_campaign(campaign_id)


@router.get("/{campaign_id}/completions/me", response_model=list[str])
async def get_my_completions(campaign_id: str, user: CurrentUser, db: Database):
    """IDs de las tareas que el usuario ya completó"""
    service = CampaignService(db)
    await service.get_campaign(campaign_id)
    return await service.get_completed_task_ids(campaign_id, user.id)


@router.post("/{campaign_id}/tasks/{task_id}/complete", response_model=CompletionResponse)
async def complete_task(
    campaign_id: str,
    task_id: str,
    user: CurrentUser,
    db: Database
):
    """Marca la tarea como completada y suma los puntos"""
    service = CampaignService(db)
    return await service.complete_task(user.id, campaign_id, task_id)
