"""Tests for health endpoint and error rendering."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_first_request_issues_session_cookie(client: AsyncClient):
    response = await client.get("/api/cart")
    assert response.status_code == 200

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("sid=")
    assert "httponly" in set_cookie.lower()
    assert "sessionId" not in response.json()["cart"]


@pytest.mark.asyncio
async def test_session_cookie_is_reused(client: AsyncClient):
    first = await client.get("/api/cart")
    second = await client.get("/api/cart")

    assert "set-cookie" not in second.headers
    assert first.json()["cart"]["id"] == second.json()["cart"]["id"]


@pytest.mark.asyncio
async def test_validation_error_is_structured_400(client: AsyncClient):
    response = await client.post("/api/cart/items", json={"quantity": 1})
    assert response.status_code == 400

    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    locs = [field["loc"] for field in error["detail"]["fields"]]
    assert ["body", "productId"] in locs


@pytest.mark.asyncio
async def test_not_found_is_structured_404(client: AsyncClient):
    response = await client.get("/api/products/999")
    assert response.status_code == 404
    assert response.json() == {
        "error": {
            "code": "NOT_FOUND",
            "message": "Product not found",
            "detail": {"product_id": 999},
        }
    }
