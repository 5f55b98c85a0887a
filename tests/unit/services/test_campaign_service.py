"""
Unit tests for CampaignService and the campaign creation wizard
"""

from datetime import datetime, timedelta, timezone

import pytest

from akari.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from akari.models.campaign import FollowTwitterTask, JoinTelegramTask, RetweetTask, WizardState
from akari.services.campaign_service import CampaignService
from akari.services.campaign_wizard import CampaignWizard, parse_task_line


class TestCampaignService:
    """Test suite for task completion."""

    @pytest.mark.asyncio
    async def test_complete_task_awards_default_points(self, test_db, make_user, make_campaign):
        user = await make_user()
        campaign_id = await make_campaign()
        service = CampaignService(test_db)

        # Act
        result = await service.complete_task(user.id, campaign_id, "t1")

        # Assert
        assert result["pointsAwarded"] == 0.2
        assert result["points"] == 0.2
        completion = await test_db["task_completions"].find_one({"user_id": user.id})
        assert completion["task_id"] == "t1"
        assert completion["points"] == 0.2

    @pytest.mark.asyncio
    async def test_complete_task_uses_task_reward(self, test_db, make_user, make_campaign):
        user = await make_user()
        campaign_id = await make_campaign()
        service = CampaignService(test_db)

        result = await service.complete_task(user.id, campaign_id, "t2")

        assert result["pointsAwarded"] == 1.5
        assert (await test_db["users"].find_one({"_id": user.id}))["points"] == 1.5

    @pytest.mark.asyncio
    async def test_complete_task_twice(self, test_db, make_user, make_campaign):
        user = await make_user()
        campaign_id = await make_campaign()
        service = CampaignService(test_db)
        await service.complete_task(user.id, campaign_id, "t2")

        with pytest.raises(InvalidStateError):
            await service.complete_task(user.id, campaign_id, "t2")

        assert (await test_db["users"].find_one({"_id": user.id}))["points"] == 1.5

    @pytest.mark.asyncio
    async def test_complete_unknown_task(self, test_db, make_user, make_campaign):
        user = await make_user()
        campaign_id = await make_campaign()
        service = CampaignService(test_db)

        with pytest.raises(NotFoundError):
            await service.complete_task(user.id, campaign_id, "nope")

    @pytest.mark.asyncio
    async def test_complete_task_on_inactive_campaign(self, test_db, make_user, make_campaign):
        user = await make_user()
        campaign_id = await make_campaign(is_active=False)
        service = CampaignService(test_db)

        with pytest.raises(InvalidStateError):
            await service.complete_task(user.id, campaign_id, "t1")

    @pytest.mark.asyncio
    async def test_list_active_campaigns(self, test_db, make_campaign):
        active_id = await make_campaign()
        await make_campaign(is_active=False)
        await make_campaign(ends_in=timedelta(days=-1))
        service = CampaignService(test_db)

        campaigns = await service.list_active_campaigns()

        assert [c.id for c in campaigns] == [active_id]
        assert isinstance(campaigns[0].tasks[1], FollowTwitterTask)


class TestParseTaskLine:
    """Task lines become validated tagged variants."""

    def test_join_telegram(self):
        task = parse_task_line("join_telegram @ton_blockchain")
        assert isinstance(task, JoinTelegramTask)
        assert task.group_id == "@ton_blockchain"
        assert task.title == "Join @ton_blockchain"

    def test_follow_twitter_with_title(self):
        task = parse_task_line("follow_twitter @akari_app Follow AKARI on X")
        assert isinstance(task, FollowTwitterTask)
        assert task.title == "Follow AKARI on X"

    def test_retweet(self):
        task = parse_task_line("retweet 1790000000000000000")
        assert isinstance(task, RetweetTask)

    def test_unknown_type(self):
        with pytest.raises(InvalidArgumentError):
            parse_task_line("like_post 123")

    def test_malformed_target(self):
        with pytest.raises(InvalidArgumentError):
            parse_task_line("retweet not-a-number")

        with pytest.raises(InvalidArgumentError):
            parse_task_line("follow_twitter @this_handle_is_way_too_long")


class TestCampaignWizard:
    """Test suite for the campaign creation state machine."""

    @staticmethod
    def _future_date() -> str:
        return (datetime.now(timezone.utc) + timedelta(days=10)).date().isoformat()

    @pytest.mark.asyncio
    async def test_full_flow_creates_campaign(self, test_db):
        wizard = CampaignWizard(test_db)
        draft = await wizard.start("founder")
        assert draft.state == WizardState.NAME

        # Act
        draft = await wizard.submit("founder", draft.id, "TON Summer")
        assert draft.state == WizardState.DESCRIPTION
        draft = await wizard.submit("founder", draft.id, "skip")
        assert draft.state == WizardState.TASKS
        draft = await wizard.submit(
            "founder", draft.id,
            "join_telegram @ton_blockchain\nretweet 1790000000000000000"
        )
        assert draft.state == WizardState.ENDS_AT
        draft = await wizard.submit("founder", draft.id, self._future_date())
        assert draft.state == WizardState.CONFIRM
        draft = await wizard.submit("founder", draft.id, "yes")

        # Assert
        assert draft.state == WizardState.DONE
        campaign = await test_db["campaigns"].find_one({"_id": draft.campaign_id})
        assert campaign["name"] == "TON Summer"
        assert campaign["description"] is None
        assert [t["type"] for t in campaign["tasks"]] == ["join_telegram", "retweet"]
        assert campaign["created_by_id"] == "founder"

    @pytest.mark.asyncio
    async def test_bad_input_does_not_advance(self, test_db):
        wizard = CampaignWizard(test_db)
        draft = await wizard.start("founder")
        draft = await wizard.submit("founder", draft.id, "Name")
        draft = await wizard.submit("founder", draft.id, "Description")

        with pytest.raises(InvalidArgumentError):
            await wizard.submit("founder", draft.id, "retweet abc")

        saved = await test_db["campaign_drafts"].find_one({"_id": draft.id})
        assert saved["state"] == "tasks"
        assert saved["name"] == "Name"
        assert saved["description"] == "Description"

    @pytest.mark.asyncio
    async def test_past_end_date_rejected(self, test_db):
        wizard = CampaignWizard(test_db)
        draft = await wizard.start("founder")
        for text in ("Name", "skip", "retweet 1"):
            draft = await wizard.submit("founder", draft.id, text)

        with pytest.raises(InvalidArgumentError):
            await wizard.submit("founder", draft.id, "2001-01-01")

        with pytest.raises(InvalidArgumentError):
            await wizard.submit("founder", draft.id, "next friday")

    @pytest.mark.asyncio
    async def test_confirm_no_cancels(self, test_db):
        wizard = CampaignWizard(test_db)
        draft = await wizard.start("founder")
        for text in ("Name", "skip", "retweet 1", self._future_date()):
            draft = await wizard.submit("founder", draft.id, text)

        with pytest.raises(InvalidArgumentError):
            await wizard.submit("founder", draft.id, "maybe")

        draft = await wizard.submit("founder", draft.id, "no")

        assert draft.state == WizardState.CANCELLED
        assert await test_db["campaigns"].count_documents({}) == 0

        with pytest.raises(InvalidStateError):
            await wizard.submit("founder", draft.id, "yes")

    @pytest.mark.asyncio
    async def test_other_users_draft(self, test_db):
        wizard = CampaignWizard(test_db)
        draft = await wizard.start("founder")

        with pytest.raises(NotFoundError):
            await wizard.submit("intruder", draft.id, "Name")

    @pytest.mark.asyncio
    async def test_empty_input(self, test_db):
        wizard = CampaignWizard(test_db)
        draft = await wizard.start("founder")

        with pytest.raises(InvalidArgumentError):
            await wizard.submit("founder", draft.id, "   ")
