"""
Pytest fixtures and configuration for all tests.
"""

import os

# Settings are read on first use; these must exist before any akari import
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret-key-at-least-32-chars-long")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-BOT-TOKEN")
os.environ.setdefault("ADMIN_TELEGRAM_IDS", "900")
# mongomock has no multi-document transactions
os.environ["MONGODB_TRANSACTIONS"] = "false"
os.environ["TELEGRAM_NOTIFICATIONS"] = "false"

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.models.user import UserCreate
from akari.repositories.user_repository import UserRepository

TEST_DB_NAME = "akari_test"


@pytest.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """
    Provide a clean in-memory database for each test.

    Unique indexes are created so duplicate inserts fail like in production.
    """
    client = AsyncMongoMockClient()
    db = client[TEST_DB_NAME]

    await db.users.create_index("telegram_id", unique=True)
    await db.bets.create_index([("prediction_id", 1), ("user_id", 1)], unique=True)
    await db.task_completions.create_index(
        [("campaign_id", 1), ("task_id", 1), ("user_id", 1)], unique=True
    )

    yield db

    for collection_name in await db.list_collection_names():
        await db[collection_name].drop()


@pytest.fixture
def make_user(test_db):
    """Factory: create a user with the given balances."""
    async def _make_user(
        telegram_id: str = "1001",
        points: float = 0,
        myst_balance: float = 0,
        is_admin: bool = False,
        username: str = None,
    ):
        repo = UserRepository(test_db)
        user = await repo.create(UserCreate(
            telegram_id=telegram_id,
            username=username or f"user{telegram_id}",
            first_name="Test",
            is_admin=is_admin,
        ))
        if points or myst_balance:
            await test_db["users"].update_one(
                {"_id": user.id},
                {"$set": {"points": points, "myst_balance": myst_balance}}
            )
        return await repo.get_by_id(user.id)

    return _make_user


@pytest.fixture
def make_prediction(test_db):
    """Factory: insert an open prediction document."""
    async def _make_prediction(
        options=("Yes", "No"),
        pot: int = 0,
        resolved: bool = False,
        ends_in: timedelta = timedelta(days=1),
        entry_fee_points: int = 0,
    ):
        now = datetime.now(timezone.utc)
        doc = {
            "_id": uuid.uuid4().hex,
            "title": "Will TON reach $10?",
            "description": None,
            "options": list(options),
            "entry_fee_stars": 0,
            "entry_fee_points": entry_fee_points,
            "pot": pot,
            "resolved": resolved,
            "winning_option": None,
            "resolved_at": None,
            "creator_id": "creator",
            "ends_at": (now + ends_in).replace(tzinfo=None),
            "created_at": now,
        }
        await test_db["predictions"].insert_one(doc)
        return doc["_id"]

    return _make_prediction


@pytest.fixture
def make_bet(test_db):
    """Factory: insert a bet document (does not touch the pot)."""
    async def _make_bet(prediction_id: str, user_id: str, option: str, amount: int):
        doc = {
            "_id": uuid.uuid4().hex,
            "prediction_id": prediction_id,
            "user_id": user_id,
            "option": option,
            "amount": amount,
            "denomination": "stars",
            "payout": None,
            "created_at": datetime.now(timezone.utc),
        }
        await test_db["bets"].insert_one(doc)
        return doc["_id"]

    return _make_bet


@pytest.fixture
def make_campaign(test_db):
    """Factory: insert an active campaign with three tasks."""
    async def _make_campaign(is_active: bool = True, ends_in: timedelta = timedelta(days=7)):
        now = datetime.now(timezone.utc)
        doc = {
            "_id": uuid.uuid4().hex,
            "name": "TON Summer",
            "description": "Engage with TON",
            "tasks": [
                {"id": "t1", "type": "join_telegram", "title": "Join", "group_id": "@ton_blockchain", "reward_points": None},
                {"id": "t2", "type": "follow_twitter", "title": "Follow", "username": "@ton_blockchain", "reward_points": 1.5},
                {"id": "t3", "type": "retweet", "title": "Retweet", "tweet_id": "1790000000000000000", "reward_points": None},
            ],
            "created_by_id": "creator",
            "starts_at": (now - timedelta(days=1)).replace(tzinfo=None),
            "ends_at": (now + ends_in).replace(tzinfo=None),
            "is_active": is_active,
            "leaderboard_snapshot": None,
            "leaderboard_updated_at": None,
            "created_at": now,
        }
        await test_db["campaigns"].insert_one(doc)
        return doc["_id"]

    return _make_campaign


@pytest.fixture
def sample_telegram_user():
    """Telegram WebApp `user` payload."""
    return {
        "id": 424242,
        "first_name": "Satoshi",
        "username": "satoshi",
        "photo_url": "https://t.me/i/userpic/320/satoshi.jpg",
    }
