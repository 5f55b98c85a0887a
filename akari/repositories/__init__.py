from .user_repository import UserRepository
from .prediction_repository import PredictionRepository
from .reward_repository import RewardRepository
from .myst_transaction_repository import MystTransactionRepository
from .campaign_repository import CampaignRepository
from .campaign_draft_repository import CampaignDraftRepository

__all__ = [
    "UserRepository",
    "PredictionRepository",
    "RewardRepository",
    "MystTransactionRepository",
    "CampaignRepository",
    "CampaignDraftRepository",
]
