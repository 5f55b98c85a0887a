"""
AuthService - Telegram WebApp authentication logic.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from akari.core.config import get_settings
from akari.core.errors import UnauthorizedError
from akari.core.security import TelegramAuthError, create_access_token, verify_telegram_init_data
from akari.models.user import User, UserCreate
from akari.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.user_repo = UserRepository(db)

    async def authenticate_with_telegram(self, init_data: str) -> tuple[User, str]:
        """
        Authenticate user with Telegram WebApp initData.

        1. Verifies the initData signature and age
        2. Creates or finds user in database (admin flag from settings)
        3. Returns user and JWT access token

        Returns: (user, jwt_token)
        Raises: UnauthorizedError on failure
        """
        try:
            tg_user = verify_telegram_init_data(init_data)
        except TelegramAuthError as e:
            raise UnauthorizedError(str(e))

        telegram_id = str(tg_user["id"])
        username = tg_user.get("username")
        first_name = tg_user.get("first_name")
        is_admin = telegram_id in get_settings().admin_ids

        # Find or create user
        user = await self.user_repo.get_by_telegram_id(telegram_id)

        if user is None:
            user_data = UserCreate(
                telegram_id=telegram_id,
                username=username,
                first_name=first_name,
                avatar_url=tg_user.get("photo_url"),
                is_admin=is_admin
            )
            user = await self.user_repo.create(user_data)
            logger.info(f"👤 New user {user.id} (telegram {telegram_id})")
        else:
            user = await self.user_repo.update_login(user.id, username, first_name, is_admin)

        # Generate JWT
        access_token = create_access_token(user.id, user.telegram_id)

        return user, access_token
