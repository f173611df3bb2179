"""Shared fixtures.

The app runs against in-memory SQLite and an in-process Redis double, so the
suite needs neither Postgres nor Redis. ASGITransport does not run the
lifespan, so the fixtures initialize both stores themselves.
"""

from decimal import Decimal
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from storefront.main import app
from storefront.models import Product, ProductCategory, ProductVariant
from storefront.stores import postgres
from storefront.stores import redis as redis_store

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeRedis:
    """Just enough of redis.asyncio.Redis for session storage."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return 1 if self.data.pop(key, None) is not None else 0

    async def aclose(self) -> None:
        pass


@pytest.fixture
async def db():
    """Fresh schema per test."""
    await postgres.init_db(TEST_DATABASE_URL)
    await postgres.create_tables()
    yield
    await postgres.close_db()


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(redis_store, "_redis", fake)
    return fake


@pytest.fixture
async def client(db, fake_redis):
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def other_client(db, fake_redis):
    """A second browser with its own cookie jar."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


_sku_counter = 0


async def _insert_product(**overrides: Any) -> Product:
    global _sku_counter
    _sku_counter += 1
    values: dict[str, Any] = {
        "name": f"Lawn Suit {_sku_counter}",
        "description": "Three piece printed lawn suit",
        "sku": f"TEST-{_sku_counter:05d}",
        "price": Decimal("5000.00"),
        "category": ProductCategory.LAWN_SUITS,
        "thumbnail_image": "https://img.example/thumb.jpg",
    }
    values.update(overrides)
    async with postgres.get_session() as session:
        product = Product(**values)
        session.add(product)
        await session.flush()
    return product


async def _insert_variant(product_id: int, **overrides: Any) -> ProductVariant:
    async with postgres.get_session() as session:
        variant = ProductVariant(product_id=product_id, **overrides)
        session.add(variant)
        await session.flush()
    return variant


@pytest.fixture
def make_product(db):
    """Insert a product (defaults: lawn suit priced 5000) and return it."""
    return _insert_product


@pytest.fixture
def make_variant(db):
    return _insert_variant


@pytest.fixture
def register():
    """Register through the API with the given client; returns the user JSON."""

    async def _register(client: AsyncClient, username: str = "ayesha", **extra: Any) -> dict[str, Any]:
        payload = {
            "username": username,
            "password": "secret123",
            "email": f"{username}@example.com",
            "fullName": username.title(),
        }
        payload.update(extra)
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def checkout_body() -> dict[str, str]:
    return {
        "shippingAddress": "12 Mall Road, Lahore",
        "billingAddress": "12 Mall Road, Lahore",
        "paymentMethod": "cod",
    }
