"""
LeaderboardService - Rankings derived from task completion events and points.

Leaderboards are never stored as primary data: they are recomputed from the
completion events on every read. The snapshot written back to the campaign
(or to the `leaderboards` collection for the global board) is only a cache.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.core.config import get_settings
from akari.core.errors import NotFoundError
from akari.models.campaign import TaskCompletion
from akari.models.leaderboard import LeaderboardEntry, PointsLeaderboardEntry
from akari.repositories.campaign_repository import CampaignRepository
from akari.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

CAMPAIGN_LEADERBOARD_SIZE = 20
GLOBAL_LEADERBOARD_SIZE = 10
REWARD_ELIGIBLE_RANKS = 10


def rank_completions(
    events: Iterable[TaskCompletion],
    points_per_completion: float,
    limit: int
) -> List[tuple[str, float, int]]:
    """
    Group completion events by user and rank them.

    Score is the sum of each event's points (or `points_per_completion` when
    the event carries none). Sorted by score desc, then completion count
    desc, then user_id asc, so the same event set always gives the same
    ranking regardless of the order the events arrive in.

    Returns:
        [(user_id, score, completions), ...] truncated to `limit`
    """
    scores: dict[str, Decimal] = defaultdict(Decimal)
    counts: dict[str, int] = defaultdict(int)
    default = Decimal(str(points_per_completion))

    for event in events:
        points = default if event.points is None else Decimal(str(event.points))
        scores[event.user_id] += points
        counts[event.user_id] += 1

    ranked = sorted(
        scores,
        key=lambda user_id: (-scores[user_id], -counts[user_id], user_id)
    )

    return [
        (user_id, float(scores[user_id]), counts[user_id])
        for user_id in ranked[:limit]
    ]


class LeaderboardService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.campaign_repo = CampaignRepository(db)
        self.user_repo = UserRepository(db)
        self.leaderboards_collection = db["leaderboards"]

    async def _build_entries(
        self,
        events: List[TaskCompletion],
        limit: int,
        scope: str
    ) -> List[LeaderboardEntry]:
        ranked = rank_completions(events, get_settings().points_per_completion, limit)

        # One batched lookup for display data
        users = await self.user_repo.get_many([user_id for user_id, _, _ in ranked])

        entries = []
        for idx, (user_id, score, completions) in enumerate(ranked):
            user = users.get(user_id)
            entries.append(LeaderboardEntry(
                rank=idx + 1,
                user_id=user_id,
                username=user.username if user else None,
                avatar_url=user.avatar_url if user else None,
                tier=user.tier if user else None,
                score=score,
                completions=completions,
                scope=scope
            ))

        return entries

    async def compute_campaign_leaderboard(
        self,
        campaign_id: str,
        limit: int = CAMPAIGN_LEADERBOARD_SIZE,
        persist: bool = True
    ) -> List[LeaderboardEntry]:
        """Top completers of one campaign; optionally caches the snapshot on it."""
        campaign = await self.campaign_repo.get_by_id(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")

        events = await self.campaign_repo.list_completions(campaign_id)
        entries = await self._build_entries(events, limit, f"campaign:{campaign_id}")

        if persist:
            await self.campaign_repo.save_leaderboard_snapshot(
                campaign_id,
                [e.model_dump() for e in entries],
                datetime.now(timezone.utc)
            )
            logger.info(f"📊 Campaign {campaign_id} leaderboard snapshot: {len(entries)} rows")

        return entries

    async def compute_global_leaderboard(
        self,
        limit: int = GLOBAL_LEADERBOARD_SIZE,
        persist: bool = True
    ) -> List[LeaderboardEntry]:
        """Top completers across all campaigns."""
        events = await self.campaign_repo.list_completions()
        entries = await self._build_entries(events, limit, "global")

        if persist:
            await self.leaderboards_collection.update_one(
                {"_id": "global"},
                {"$set": {
                    "entries": [e.model_dump() for e in entries],
                    "updated_at": datetime.now(timezone.utc)
                }},
                upsert=True
            )
            logger.info(f"📊 Global leaderboard snapshot: {len(entries)} rows")

        return entries

    async def get_points_leaderboard(
        self,
        limit: int = 100,
        reward_eligible_ranks: Optional[int] = None
    ) -> List[PointsLeaderboardEntry]:
        """Users ranked by points; the top ranks are flagged reward-eligible."""
        eligible = REWARD_ELIGIBLE_RANKS if reward_eligible_ranks is None else reward_eligible_ranks
        users = await self.user_repo.list_ranked_by_points(limit)

        return [
            PointsLeaderboardEntry(
                rank=idx + 1,
                user_id=user.id,
                username=user.username,
                tier=user.tier,
                points=user.points,
                reward_eligible=idx < eligible
            )
            for idx, user in enumerate(users)
        ]
