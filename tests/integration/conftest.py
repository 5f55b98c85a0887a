"""
Fixtures for integration tests
"""

import pytest
from httpx import ASGITransport, AsyncClient

from akari.core.security import create_access_token
from akari.database import Database, get_database
from akari.main import app


@pytest.fixture
async def client(test_db):
    """
    HTTP client for testing API endpoints.

    Overrides the database dependency with the test database.
    """
    async def override_get_db():
        return test_db

    app.dependency_overrides[get_database] = override_get_db
    original_db = Database.db
    Database.db = test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    Database.db = original_db
    app.dependency_overrides.clear()


@pytest.fixture
async def test_user(make_user):
    return await make_user(telegram_id="1001", points=100, myst_balance=1000)


@pytest.fixture
def auth_headers(test_user):
    """Valid JWT headers for a regular user."""
    token = create_access_token(test_user.id, test_user.telegram_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_headers(make_user):
    """Valid JWT headers for an administrator."""
    admin = await make_user(telegram_id="900", is_admin=True)
    token = create_access_token(admin.id, admin.telegram_id)
    return {"Authorization": f"Bearer {token}"}
