"""
CampaignDraftRepository - persisted state of the campaign creation wizard.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.models.campaign import CampaignDraft


def _to_doc(draft: CampaignDraft) -> dict:
    doc = draft.model_dump(by_alias=True)
    doc["state"] = draft.state.value
    return doc


class CampaignDraftRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["campaign_drafts"]

    async def create(self, draft: CampaignDraft) -> CampaignDraft:
        await self.collection.insert_one(_to_doc(draft))
        return draft

    async def get_by_id(self, draft_id: str) -> Optional[CampaignDraft]:
        doc = await self.collection.find_one({"_id": draft_id})
        return CampaignDraft(**doc) if doc else None

    async def save(self, draft: CampaignDraft) -> CampaignDraft:
        """Overwrite the whole draft (state and collected fields)."""
        await self.collection.replace_one({"_id": draft.id}, _to_doc(draft))
        return draft
