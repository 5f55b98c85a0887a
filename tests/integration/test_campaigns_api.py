"""
Integration tests for Campaigns API endpoints
"""

from datetime import datetime, timedelta, timezone

import pytest


class TestCampaignEndpoints:
    """Test suite for /campaigns endpoints."""

    @pytest.mark.asyncio
    async def test_list_active_campaigns(self, client, make_campaign):
        campaign_id = await make_campaign()
        await make_campaign(is_active=False)

        response = await client.get("/campaigns")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["_id"] == campaign_id
        assert [t["type"] for t in data[0]["tasks"]] == ["join_telegram", "follow_twitter", "retweet"]

    @pytest.mark.asyncio
    async def test_get_missing_campaign(self, client):
        response = await client.get("/campaigns/missing")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_complete_task(self, client, auth_headers, make_campaign):
        campaign_id = await make_campaign()

        # Act
        response = await client.post(
            f"/campaigns/{campaign_id}/tasks/t2/complete",
            headers=auth_headers
        )

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["taskId"] == "t2"
        assert data["pointsAwarded"] == 1.5
        assert data["points"] == 101.5

        response = await client.get(f"/campaigns/{campaign_id}/completions/me", headers=auth_headers)
        assert response.json() == ["t2"]

    @pytest.mark.asyncio
    async def test_complete_task_twice(self, client, auth_headers, make_campaign):
        campaign_id = await make_campaign()
        await client.post(f"/campaigns/{campaign_id}/tasks/t1/complete", headers=auth_headers)

        response = await client.post(f"/campaigns/{campaign_id}/tasks/t1/complete", headers=auth_headers)

        assert response.status_code == 409
        assert "reason" in response.json()


class TestCampaignDraftEndpoints:
    """Test suite for the campaign creation wizard over HTTP."""

    @pytest.mark.asyncio
    async def test_wizard_flow(self, client, auth_headers, test_db):
        ends_at = (datetime.now(timezone.utc) + timedelta(days=5)).date().isoformat()

        # Act
        response = await client.post("/campaigns/drafts", headers=auth_headers)
        assert response.status_code == 201
        draft_id = response.json()["draftId"]
        assert response.json()["state"] == "name"

        for text, next_state in (
            ("TON Summer", "description"),
            ("Engage with TON", "tasks"),
            ("follow_twitter @ton_blockchain", "ends_at"),
            (ends_at, "confirm"),
            ("yes", "done"),
        ):
            response = await client.post(
                f"/campaigns/drafts/{draft_id}/input",
                json={"text": text},
                headers=auth_headers
            )
            assert response.status_code == 200
            assert response.json()["state"] == next_state

        # Assert
        campaign_id = response.json()["campaignId"]
        response = await client.get(f"/campaigns/{campaign_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "TON Summer"

    @pytest.mark.asyncio
    async def test_wizard_rejects_bad_task(self, client, auth_headers):
        response = await client.post("/campaigns/drafts", headers=auth_headers)
        draft_id = response.json()["draftId"]
        for text in ("Name", "skip"):
            await client.post(f"/campaigns/drafts/{draft_id}/input", json={"text": text}, headers=auth_headers)

        response = await client.post(
            f"/campaigns/drafts/{draft_id}/input",
            json={"text": "like_post 42"},
            headers=auth_headers
        )

        assert response.status_code == 400
        assert "reason" in response.json()
