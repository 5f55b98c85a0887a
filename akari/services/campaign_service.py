"""
Servicio de Campañas - Lectura de campañas y completions de tareas
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.core.config import get_settings
from akari.core.errors import InvalidStateError, NotFoundError
from akari.database import start_transaction, to_mongo_datetime
from akari.models.campaign import Campaign
from akari.repositories.campaign_repository import CampaignRepository
from akari.services.points_service import PointsService

logger = logging.getLogger(__name__)


class CampaignService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = CampaignRepository(db)
        self.points = PointsService(db)

    async def list_active_campaigns(self, limit: int = 50) -> List[Campaign]:
        return await self.repo.list_active(datetime.now(timezone.utc), limit)

    async def get_campaign(self, campaign_id: str) -> Campaign:
        campaign = await self.repo.get_by_id(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        return campaign

    async def get_completed_task_ids(self, campaign_id: str, user_id: str) -> List[str]:
        return await self.repo.list_user_completions(campaign_id, user_id)

    async def complete_task(self, user_id: str, campaign_id: str, task_id: str) -> Dict[str, Any]:
        """
        Registrar que el usuario completó una tarea y darle los puntos.

        La completion y el delta de puntos van en la misma transacción.
        Una tarea solo se puede completar una vez por usuario.
        """
        campaign = await self.get_campaign(campaign_id)

        now = to_mongo_datetime(datetime.now(timezone.utc))
        if not campaign.is_active or not (
            to_mongo_datetime(campaign.starts_at) <= now <= to_mongo_datetime(campaign.ends_at)
        ):
            raise InvalidStateError("Campaign is not active")

        task = campaign.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found in campaign {campaign_id}")

        if await self.repo.get_completion(campaign_id, task_id, user_id):
            raise InvalidStateError("Task already completed")

        points = task.reward_points
        if points is None:
            points = get_settings().points_per_completion

        async with start_transaction(self.db) as session:
            try:
                await self.repo.record_completion(
                    campaign_id, task_id, user_id, points, session=session
                )
            except ValueError as e:
                raise InvalidStateError(str(e))

            balance = await self.points.apply_points_delta(user_id, points, session=session)

        logger.info(f"✅ Task {task_id} of campaign {campaign_id} completed by {user_id} (+{points})")

        return {
            "taskId": task_id,
            "pointsAwarded": points,
            "points": balance
        }
