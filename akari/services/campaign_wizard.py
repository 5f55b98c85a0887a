"""
Asistente de creación de campañas (máquina de estados)

    name -> description -> tasks -> ends_at -> confirm -> done
                                                       -> cancelled

Cada paso recibe un texto, lo valida y guarda el borrador. Si la entrada
no es válida se lanza InvalidArgumentError y el estado no avanza.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import TypeAdapter, ValidationError

from akari.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from akari.database import to_mongo_datetime
from akari.models.campaign import Campaign, CampaignDraft, CampaignTask, WizardState
from akari.repositories.campaign_draft_repository import CampaignDraftRepository
from akari.repositories.campaign_repository import CampaignRepository

logger = logging.getLogger(__name__)

MAX_TASKS = 10

PROMPTS = {
    WizardState.NAME: "Send the campaign name.",
    WizardState.DESCRIPTION: "Send a short description, or 'skip'.",
    WizardState.TASKS: (
        "Send the tasks, one per line: "
        "'join_telegram @group', 'follow_twitter @user' or 'retweet <tweet_id>'. "
        "An optional title can follow the target."
    ),
    WizardState.ENDS_AT: "Send the end date (YYYY-MM-DD or ISO datetime, UTC).",
    WizardState.CONFIRM: "Create the campaign? (yes/no)",
    WizardState.DONE: "Campaign created.",
    WizardState.CANCELLED: "Campaign creation cancelled.",
}

# Campo de la tarea que recibe el "target" de cada línea
TASK_TARGET_FIELDS = {
    "join_telegram": ("group_id", "Join {}"),
    "follow_twitter": ("username", "Follow {}"),
    "retweet": ("tweet_id", "Retweet {}"),
}

_task_adapter = TypeAdapter(CampaignTask)


def parse_task_line(line: str) -> CampaignTask:
    """'follow_twitter @akari Follow us' -> FollowTwitterTask"""
    parts = line.split(maxsplit=2)
    if len(parts) < 2 or parts[0] not in TASK_TARGET_FIELDS:
        raise InvalidArgumentError(f"Invalid task line: '{line}'")

    task_type, target = parts[0], parts[1]
    field, title_template = TASK_TARGET_FIELDS[task_type]
    title = parts[2] if len(parts) == 3 else title_template.format(target)

    try:
        return _task_adapter.validate_python({
            "type": task_type,
            "title": title,
            field: target,
        })
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid task '{line}': {e.errors()[0]['msg']}")


def parse_end_date(text: str, now: datetime) -> datetime:
    try:
        ends_at = datetime.fromisoformat(text.strip())
    except ValueError:
        raise InvalidArgumentError(f"Invalid date: '{text}'")

    ends_at = to_mongo_datetime(ends_at)
    if ends_at <= to_mongo_datetime(now):
        raise InvalidArgumentError("End date must be in the future")
    return ends_at


class CampaignWizard:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.draft_repo = CampaignDraftRepository(db)
        self.campaign_repo = CampaignRepository(db)

        self._handlers: Dict[WizardState, Callable] = {
            WizardState.NAME: self._handle_name,
            WizardState.DESCRIPTION: self._handle_description,
            WizardState.TASKS: self._handle_tasks,
            WizardState.ENDS_AT: self._handle_ends_at,
            WizardState.CONFIRM: self._handle_confirm,
        }

    @staticmethod
    def describe(draft: CampaignDraft) -> Dict[str, Any]:
        return {
            "draftId": draft.id,
            "state": draft.state.value,
            "prompt": PROMPTS[draft.state],
            "campaignId": draft.campaign_id,
        }

    async def start(self, user_id: str) -> CampaignDraft:
        now = datetime.now(timezone.utc)
        draft = CampaignDraft(
            _id=uuid.uuid4().hex,
            user_id=user_id,
            state=WizardState.NAME,
            created_at=now,
            updated_at=now,
        )
        await self.draft_repo.create(draft)
        logger.info(f"🧙 Campaign draft {draft.id} started by {user_id}")
        return draft

    async def submit(self, user_id: str, draft_id: str, text: str) -> CampaignDraft:
        """
        Procesar la entrada del paso actual.

        Raises:
            NotFoundError: el borrador no existe o es de otro usuario
            InvalidStateError: el asistente ya terminó
            InvalidArgumentError: entrada inválida (el estado no cambia)
        """
        draft = await self.draft_repo.get_by_id(draft_id)
        if draft is None or draft.user_id != user_id:
            raise NotFoundError(f"Draft {draft_id} not found")

        handler = self._handlers.get(draft.state)
        if handler is None:
            raise InvalidStateError(f"Draft is already {draft.state.value}")

        text = (text or "").strip()
        if not text:
            raise InvalidArgumentError("Input cannot be empty")

        now = datetime.now(timezone.utc)
        await handler(draft, text, now)

        draft.updated_at = now
        await self.draft_repo.save(draft)
        return draft

    # ============================================
    # Pasos
    # ============================================

    async def _handle_name(self, draft: CampaignDraft, text: str, now: datetime):
        if len(text) > 100:
            raise InvalidArgumentError("Name must be at most 100 characters")
        draft.name = text
        draft.state = WizardState.DESCRIPTION

    async def _handle_description(self, draft: CampaignDraft, text: str, now: datetime):
        if len(text) > 1000:
            raise InvalidArgumentError("Description must be at most 1000 characters")
        draft.description = None if text.lower() == "skip" else text
        draft.state = WizardState.TASKS

    async def _handle_tasks(self, draft: CampaignDraft, text: str, now: datetime):
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if len(lines) > MAX_TASKS:
            raise InvalidArgumentError(f"At most {MAX_TASKS} tasks per campaign")

        draft.tasks = [parse_task_line(line) for line in lines]
        draft.state = WizardState.ENDS_AT

    async def _handle_ends_at(self, draft: CampaignDraft, text: str, now: datetime):
        draft.ends_at = parse_end_date(text, now)
        draft.state = WizardState.CONFIRM

    async def _handle_confirm(self, draft: CampaignDraft, text: str, now: datetime):
        answer = text.lower()
        if answer not in ("yes", "no"):
            raise InvalidArgumentError("Answer 'yes' or 'no'")

        if answer == "no":
            draft.state = WizardState.CANCELLED
            return

        campaign = Campaign(
            _id=uuid.uuid4().hex,
            name=draft.name,
            description=draft.description,
            tasks=draft.tasks,
            created_by_id=draft.user_id,
            starts_at=to_mongo_datetime(now),
            ends_at=draft.ends_at,
            is_active=True,
            created_at=now,
        )
        await self.campaign_repo.create(campaign)

        draft.campaign_id = campaign.id
        draft.state = WizardState.DONE
        logger.info(f"📣 Campaign {campaign.id} created from draft {draft.id}")
