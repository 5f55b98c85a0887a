"""
Integration tests for Leaderboard API endpoints
"""

import pytest

from akari.services.campaign_service import CampaignService


class TestLeaderboardEndpoints:
    """Test suite for /leaderboard endpoints."""

    @pytest.mark.asyncio
    async def test_points_leaderboard(self, client, make_user):
        top = await make_user(telegram_id="1", points=500)
        await make_user(telegram_id="2", points=20)

        response = await client.get("/leaderboard")

        assert response.status_code == 200
        data = response.json()
        assert [row["rank"] for row in data] == [1, 2]
        assert data[0]["user_id"] == top.id
        assert data[0]["reward_eligible"] is True

    @pytest.mark.asyncio
    async def test_campaign_leaderboard(self, client, test_db, make_user, make_campaign):
        alice = await make_user(telegram_id="1", username="alice")
        bob = await make_user(telegram_id="2", username="bob")
        campaign_id = await make_campaign()
        service = CampaignService(test_db)
        await service.complete_task(bob.id, campaign_id, "t1")
        await service.complete_task(alice.id, campaign_id, "t1")
        await service.complete_task(alice.id, campaign_id, "t3")

        # Act
        response = await client.get(f"/leaderboard/campaigns/{campaign_id}")

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["scope"] == f"campaign:{campaign_id}"
        assert [e["username"] for e in data["entries"]] == ["alice", "bob"]
        assert data["entries"][0]["score"] == 0.4
        assert data["entries"][0]["completions"] == 2

    @pytest.mark.asyncio
    async def test_campaign_leaderboard_not_found(self, client):
        response = await client.get("/leaderboard/campaigns/missing")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_global_leaderboard(self, client, test_db, make_user, make_campaign):
        user = await make_user(telegram_id="1")
        first = await make_campaign()
        second = await make_campaign()
        service = CampaignService(test_db)
        await service.complete_task(user.id, first, "t2")
        await service.complete_task(user.id, second, "t2")

        response = await client.get("/leaderboard/completions")

        assert response.status_code == 200
        data = response.json()
        assert data["scope"] == "global"
        assert len(data["entries"]) == 1
        assert data["entries"][0]["score"] == 3.0
