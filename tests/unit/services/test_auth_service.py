"""
Unit tests for AuthService and Telegram initData validation
"""

import hashlib
import hmac
import json
import time
from urllib.parse import urlencode

import pytest

from akari.core.config import get_settings
from akari.core.errors import UnauthorizedError
from akari.core.security import (
    TelegramAuthError,
    decode_access_token,
    verify_telegram_init_data,
)
from akari.services.auth_service import AuthService


def build_init_data(user: dict, auth_date: int = None, bot_token: str = None) -> str:
    """Sign initData the way Telegram does."""
    fields = {
        "auth_date": str(auth_date if auth_date is not None else int(time.time())),
        "query_id": "AAHdF6IQAAAAAN0XohDhrOrc",
        "user": json.dumps(user, separators=(",", ":")),
    }
    token = bot_token or get_settings().telegram_bot_token
    data_check_string = "\n".join(f"{k}={v}" for k, v in sorted(fields.items()))
    secret_key = hmac.new(b"WebAppData", token.encode(), hashlib.sha256).digest()
    fields["hash"] = hmac.new(secret_key, data_check_string.encode(), hashlib.sha256).hexdigest()
    return urlencode(fields)


class TestVerifyInitData:
    """Signature and freshness checks."""

    def test_valid_init_data(self, sample_telegram_user):
        user = verify_telegram_init_data(build_init_data(sample_telegram_user))

        assert user["id"] == sample_telegram_user["id"]
        assert user["username"] == "satoshi"

    def test_wrong_bot_token(self, sample_telegram_user):
        init_data = build_init_data(sample_telegram_user, bot_token="999:OTHER")

        with pytest.raises(TelegramAuthError):
            verify_telegram_init_data(init_data)

    def test_tampered_user(self, sample_telegram_user):
        init_data = build_init_data(sample_telegram_user).replace("satoshi", "vitalik")

        with pytest.raises(TelegramAuthError):
            verify_telegram_init_data(init_data)

    def test_expired(self, sample_telegram_user):
        init_data = build_init_data(sample_telegram_user, auth_date=int(time.time()) - 2 * 86400)

        with pytest.raises(TelegramAuthError):
            verify_telegram_init_data(init_data)

    def test_missing_hash(self):
        with pytest.raises(TelegramAuthError):
            verify_telegram_init_data("auth_date=1&user=%7B%7D")


class TestAuthService:
    """Test suite for AuthService authentication logic."""

    @pytest.mark.asyncio
    async def test_authenticate_new_user(self, test_db, sample_telegram_user):
        """Authenticating a new Telegram user creates the account."""
        service = AuthService(test_db)

        # Act
        user, token = await service.authenticate_with_telegram(build_init_data(sample_telegram_user))

        # Assert
        assert user.telegram_id == "424242"
        assert user.username == "satoshi"
        assert user.points == 0
        assert user.tier == "Seeker_L1"
        assert user.is_admin is False

        payload = decode_access_token(token)
        assert payload["sub"] == user.id
        assert payload["tg"] == "424242"

        saved = await test_db["users"].find_one({"telegram_id": "424242"})
        assert saved is not None

    @pytest.mark.asyncio
    async def test_authenticate_existing_user(self, test_db, sample_telegram_user, make_user):
        """Existing users keep their id and balances."""
        existing = await make_user(telegram_id="424242", points=50)
        service = AuthService(test_db)

        user, _ = await service.authenticate_with_telegram(build_init_data(sample_telegram_user))

        assert user.id == existing.id
        assert user.points == 50
        assert user.username == "satoshi"
        assert await test_db["users"].count_documents({}) == 1

    @pytest.mark.asyncio
    async def test_admin_flag_from_settings(self, test_db):
        service = AuthService(test_db)

        user, _ = await service.authenticate_with_telegram(
            build_init_data({"id": 900, "first_name": "Admin"})
        )

        assert user.is_admin is True

    @pytest.mark.asyncio
    async def test_invalid_init_data(self, test_db):
        service = AuthService(test_db)

        with pytest.raises(UnauthorizedError):
            await service.authenticate_with_telegram("hash=deadbeef&auth_date=1")
