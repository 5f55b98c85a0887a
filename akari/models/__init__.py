from .user import User, UserCreate, UserResponse
from .tier import Tier, TIERS, tier_for_points
from .prediction import (
    Prediction,
    PredictionCreate,
    Bet,
    BetCreate,
    BetDenomination,
    Settlement,
    WinnerPayout,
)
from .reward import (
    Reward,
    RewardStatus,
    MystTransaction,
    RewardClaimRequest,
    RewardCreate,
    UnpaidRewardView,
    PaidRewardView,
    RewardList,
    ClaimResult,
)
from .campaign import Campaign, CampaignTask, CampaignDraft, TaskCompletion, WizardState
from .leaderboard import LeaderboardEntry, PointsLeaderboardEntry

__all__ = [
    "User",
    "UserCreate",
    "UserResponse",
    "Tier",
    "TIERS",
    "tier_for_points",
    "Prediction",
    "PredictionCreate",
    "Bet",
    "BetCreate",
    "BetDenomination",
    "Settlement",
    "WinnerPayout",
    "Reward",
    "RewardStatus",
    "MystTransaction",
    "RewardClaimRequest",
    "RewardCreate",
    "UnpaidRewardView",
    "PaidRewardView",
    "RewardList",
    "ClaimResult",
    "Campaign",
    "CampaignTask",
    "CampaignDraft",
    "TaskCompletion",
    "WizardState",
    "LeaderboardEntry",
    "PointsLeaderboardEntry",
]
