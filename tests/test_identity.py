"""Session gate: guest carts follow the shopper through login/registration."""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from storefront.models import Cart
from storefront.services.carts import add_item, load_cart_view
from storefront.services.identity import SessionContext, associate_guest_cart, resolve_cart
from storefront.settings import get_settings
from storefront.stores.postgres import get_session


async def login(client: AsyncClient, username: str) -> None:
    response = await client.post("/api/auth/login", json={"username": username, "password": "secret123"})
    assert response.status_code == 200, response.text


@pytest.mark.asyncio
async def test_registration_claims_guest_cart(client: AsyncClient, make_product, register):
    product = await make_product(price=Decimal("5000.00"))
    await client.post("/api/cart/items", json={"productId": product.id, "quantity": 2})

    before = (await client.get("/api/cart")).json()
    assert before["cart"]["userId"] is None
    assert before["items"][0]["quantity"] == 2
    assert before["items"][0]["lineTotal"] == 10000

    user = await register(client)

    after = (await client.get("/api/cart")).json()
    assert after["cart"]["id"] == before["cart"]["id"]
    assert after["cart"]["userId"] == user["id"]
    assert [(i["productId"], i["quantity"]) for i in after["items"]] == [(product.id, 2)]


@pytest.mark.asyncio
async def test_login_merges_guest_cart_with_saved_cart(
    client: AsyncClient, other_client: AsyncClient, make_product, register
):
    shared = await make_product(price=Decimal("5000.00"))
    extra = await make_product(price=Decimal("3000.00"))

    await register(client, "zara")
    await client.post("/api/cart/items", json={"productId": shared.id, "quantity": 1})

    await other_client.post("/api/cart/items", json={"productId": shared.id, "quantity": 2})
    await other_client.post("/api/cart/items", json={"productId": extra.id, "quantity": 1})
    await login(other_client, "zara")

    cart = (await other_client.get("/api/cart")).json()
    quantities = {i["productId"]: i["quantity"] for i in cart["items"]}
    assert quantities == {shared.id: 3, extra.id: 1}
    assert cart["subtotal"] == 3 * 5000 + 3000

    async with get_session() as session:
        assert (await session.execute(select(func.count(Cart.id)))).scalar_one() == 1


@pytest.mark.asyncio
async def test_login_without_guest_cart_adopts_saved_cart(
    client: AsyncClient, other_client: AsyncClient, make_product, register
):
    product = await make_product()
    await register(client, "hina")
    await client.post("/api/cart/items", json={"productId": product.id, "quantity": 4})

    await login(other_client, "hina")

    cart = (await other_client.get("/api/cart")).json()
    assert [(i["productId"], i["quantity"]) for i in cart["items"]] == [(product.id, 4)]


@pytest.mark.asyncio
async def test_logout_ends_authentication(client: AsyncClient, register, fake_redis, db):
    await register(client)
    assert (await client.get("/api/user")).status_code == 200

    response = await client.post("/api/auth/logout")
    assert response.status_code == 200
    assert not any(key.startswith("session:") for key in fake_redis.data)

    assert (await client.get("/api/user")).status_code == 401


@pytest.mark.asyncio
async def test_second_login_does_not_duplicate_cart(client: AsyncClient, make_product, register):
    product = await make_product()
    await register(client, "sana")
    await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1})

    await login(client, "sana")
    await login(client, "sana")

    cart = (await client.get("/api/cart")).json()
    assert [(i["productId"], i["quantity"]) for i in cart["items"]] == [(product.id, 1)]


@pytest.mark.asyncio
async def test_cart_owned_by_other_user_is_detached(make_product):
    product = await make_product()
    async with get_session() as session:
        cart = await resolve_cart(session, SessionContext(session_id="shared-device", user_id=1))
        await add_item(session, cart, product.id, 1)
        owned_id = cart.id

    async with get_session() as session:
        result = await associate_guest_cart(session, "shared-device", user_id=2)
        assert result is None

        owned = await session.get(Cart, owned_id)
        assert owned.user_id == 1
        assert owned.session_id is None
        assert len((await load_cart_view(session, owned)).items) == 1

        fresh = await resolve_cart(session, SessionContext(session_id="shared-device", user_id=2))
        assert fresh.id != owned_id


@pytest.mark.asyncio
async def test_registration_replaces_planted_session_id(
    client: AsyncClient, other_client: AsyncClient, make_product, fake_redis
):
    name = get_settings().session_cookie_name
    planted = {"Cookie": f"{name}=attackerchosen123"}
    product = await make_product()
    await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=planted)

    response = await client.post(
        "/api/auth/register",
        json={"username": "victim", "password": "secret123", "email": "victim@example.com"},
        headers=planted,
    )
    assert response.status_code == 201, response.text
    assert client.cookies.get(name) != "attackerchosen123"
    assert "session:attackerchosen123" not in fake_redis.data

    assert (await other_client.get("/api/user", headers=planted)).status_code == 401
    assert (await client.get("/api/user")).json()["username"] == "victim"

    cart = (await client.get("/api/cart")).json()
    assert [(i["productId"], i["quantity"]) for i in cart["items"]] == [(product.id, 1)]


@pytest.mark.asyncio
async def test_login_reissues_session_cookie(client: AsyncClient, register, fake_redis):
    settings = get_settings()
    await register(client, "mehr")
    before = client.cookies.get(settings.session_cookie_name)

    response = await client.post("/api/auth/login", json={"username": "mehr", "password": "secret123"})
    assert response.status_code == 200

    set_cookie = response.headers["set-cookie"]
    assert f"Max-Age={settings.session_ttl_seconds}" in set_cookie
    after = client.cookies.get(settings.session_cookie_name)
    assert after != before
    assert fake_redis.ttls[f"session:{after}"] == settings.session_ttl_seconds
    assert f"session:{before}" not in fake_redis.data


@pytest.mark.asyncio
async def test_expired_session_loses_access_to_user_cart(
    client: AsyncClient, make_product, register, fake_redis, checkout_body
):
    product = await make_product()
    user = await register(client, "noor")
    await client.post("/api/cart/items", json={"productId": product.id, "quantity": 2})

    fake_redis.data.clear()

    cart = (await client.get("/api/cart")).json()
    assert cart["cart"]["userId"] is None
    assert cart["items"] == []

    response = await client.post("/api/orders", json=checkout_body)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EMPTY_CART"

    await login(client, "noor")
    cart = (await client.get("/api/cart")).json()
    assert cart["cart"]["userId"] == user["id"]
    assert [(i["productId"], i["quantity"]) for i in cart["items"]] == [(product.id, 2)]


@pytest.mark.asyncio
async def test_anonymous_session_never_resolves_user_cart(make_product):
    product = await make_product()
    async with get_session() as session:
        owned = await resolve_cart(session, SessionContext(session_id="stale", user_id=1))
        await add_item(session, owned, product.id, 1)

    async with get_session() as session:
        fresh = await resolve_cart(session, SessionContext(session_id="stale"))
        assert fresh.id != owned.id
        assert fresh.user_id is None

        detached = await session.get(Cart, owned.id)
        assert detached.session_id is None
        assert detached.user_id == 1
