"""
Shared fixtures: a throwaway SQLite database and file directories, a fresh
schema per test, and authenticated request headers.
"""

import asyncio
import os
import tempfile
import uuid

_TMP_DIR = tempfile.mkdtemp(prefix="tequilas-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/tequilas-test.db"
os.environ["STATIC_DIRECTORY"] = os.path.join(_TMP_DIR, "static")
os.environ["DATA_DIRECTORY"] = os.path.join(_TMP_DIR, "data")
os.environ["SEED_CATALOG"] = "true"
os.environ["ENV_MODE"] = "development"
os.environ["DEBUG"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

from tequilas.core.config import get_settings  # noqa: E402
from tequilas.database import async_session_maker, drop_db, init_db  # noqa: E402
from tequilas.main import app  # noqa: E402
from tequilas.models import Order  # noqa: E402

PASSWORD = "S3cret!pass"


async def _reset_schema() -> None:
    await drop_db()
    await init_db()


@pytest.fixture
def client():
    """App client on an empty schema; startup seeds the admin and the menu."""
    asyncio.run(_reset_schema())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    settings = get_settings()
    response = client.post(
        "/api/auth/login",
        json={"email": settings.admin_email, "password": settings.admin_password},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def make_user(client):
    """Register a customer and return its bearer headers."""

    def _make_user(name: str = None) -> dict[str, str]:
        name = name or f"user_{uuid.uuid4().hex[:8]}"
        email = f"{name}@example.com"
        response = client.post(
            "/api/auth/register",
            json={"userName": name, "email": email, "password": PASSWORD},
        )
        assert response.status_code == 200, response.text

        response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _make_user


@pytest.fixture
def user_headers(make_user) -> dict[str, str]:
    return make_user()


@pytest.fixture
def place_order(client):
    """POST an order and return the parsed response."""

    def _place_order(headers, items, **details):
        payload = {
            "fullName": "Jane Doe",
            "address": "1 Main St",
            "contactNumber": "555-0100",
            "paymentMethod": "card",
            "orderItems": [{"productId": pid, "quantity": qty} for pid, qty in items],
        }
        payload.update(details)
        response = client.post("/api/orders", json=payload, headers=headers)
        assert response.status_code == 200, response.text
        return response.json()

    return _place_order


@pytest.fixture
def set_order_date():
    """Backdate an order directly in the database."""

    def _set_order_date(order_id: int, when) -> None:
        async def _update() -> None:
            async with async_session_maker() as session:
                await session.execute(update(Order).where(Order.id == order_id).values(order_date=when))
                await session.commit()

        asyncio.run(_update())

    return _set_order_date
