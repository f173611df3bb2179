import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_wishlist_requires_login(client: AsyncClient, make_product):
    product = await make_product()

    assert (await client.get("/api/wishlist")).status_code == 401
    response = await client.post("/api/wishlist/items", json={"productId": product.id})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_add_is_idempotent(client: AsyncClient, make_product, register):
    await register(client)
    product = await make_product()

    first = await client.post("/api/wishlist/items", json={"productId": product.id})
    second = await client.post("/api/wishlist/items", json={"productId": product.id})

    assert first.status_code == 201
    assert second.status_code == 201
    items = second.json()["items"]
    assert len(items) == 1
    assert items[0]["productId"] == product.id
    assert items[0]["product"]["name"] == product.name


@pytest.mark.asyncio
async def test_add_unknown_product_is_404(client: AsyncClient, register, db):
    await register(client)
    response = await client.post("/api/wishlist/items", json={"productId": 999})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_remove(client: AsyncClient, make_product, register):
    await register(client)
    keep = await make_product()
    drop = await make_product()
    await client.post("/api/wishlist/items", json={"productId": keep.id})
    await client.post("/api/wishlist/items", json={"productId": drop.id})

    response = await client.delete(f"/api/wishlist/items/{drop.id}")
    assert response.status_code == 200
    assert [i["productId"] for i in response.json()["items"]] == [keep.id]

    again = await client.delete(f"/api/wishlist/items/{drop.id}")
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_wishlists_are_per_user(
    client: AsyncClient, other_client: AsyncClient, make_product, register
):
    await register(client, "amna")
    await register(other_client, "bilal")
    product = await make_product()
    await client.post("/api/wishlist/items", json={"productId": product.id})

    theirs = await other_client.get("/api/wishlist")
    assert theirs.json()["items"] == []
