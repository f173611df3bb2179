"""Catalog reads: filters, search, ordering, pagination, detail."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from storefront.models import ProductCategory, ProductCollection, ProductImage
from storefront.settings import get_settings
from storefront.stores.postgres import get_session


def names(response) -> list[str]:
    return [p["name"] for p in response.json()]


@pytest.mark.asyncio
async def test_list_is_newest_first(client: AsyncClient, make_product):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    await make_product(name="Old", created_at=base)
    await make_product(name="New", created_at=base + timedelta(days=2))
    await make_product(name="Mid", created_at=base + timedelta(days=1))

    response = await client.get("/api/products")
    assert response.status_code == 200
    assert names(response) == ["New", "Mid", "Old"]


@pytest.mark.asyncio
async def test_filters_combine(client: AsyncClient, make_product):
    await make_product(name="Bridal Red", category=ProductCategory.BRIDAL_COLLECTION, featured=True)
    await make_product(
        name="Chiffon Gold",
        category=ProductCategory.CHIFFON_SUITS,
        collection=ProductCollection.WEDDING,
        featured=True,
        best_seller=True,
    )
    await make_product(name="Lawn Mint", collection=ProductCollection.SUMMER, new_arrival=True)

    assert names(await client.get("/api/products", params={"category": "bridal_collection"})) == ["Bridal Red"]
    assert names(await client.get("/api/products", params={"collection": "summer"})) == ["Lawn Mint"]
    assert sorted(names(await client.get("/api/products", params={"featured": "true"}))) == [
        "Bridal Red",
        "Chiffon Gold",
    ]
    assert names(
        await client.get("/api/products", params={"featured": "true", "bestSeller": "true"})
    ) == ["Chiffon Gold"]
    assert names(await client.get("/api/products", params={"newArrival": "true"})) == ["Lawn Mint"]


@pytest.mark.asyncio
async def test_unknown_category_is_400(client: AsyncClient, db):
    response = await client.get("/api/products", params={"category": "sarees"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_search_is_case_insensitive_on_name_and_description(client: AsyncClient, make_product):
    await make_product(name="Embroidered Organza", description="Festive wear")
    await make_product(name="Daily Lawn", description="Light EMBROIDERY on the neckline")
    await make_product(name="Plain Cotton", description="Solid colours")

    response = await client.get("/api/products", params={"search": "embroider"})
    assert sorted(names(response)) == ["Daily Lawn", "Embroidered Organza"]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(client: AsyncClient, make_product):
    await make_product(name="100% Cotton")
    await make_product(name="Cotton Blend")

    response = await client.get("/api/products", params={"search": "100%"})
    assert names(response) == ["100% Cotton"]


@pytest.mark.asyncio
async def test_pagination(client: AsyncClient, make_product):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(5):
        await make_product(name=f"P{i}", created_at=base + timedelta(hours=i))

    page = await client.get("/api/products", params={"limit": 2, "offset": 1})
    assert names(page) == ["P3", "P2"]


@pytest.mark.asyncio
async def test_limit_is_capped(client: AsyncClient, make_product, monkeypatch: pytest.MonkeyPatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "max_page_size", 3)
    monkeypatch.setattr(settings, "default_page_size", 2)
    for _ in range(5):
        await make_product()

    assert len((await client.get("/api/products")).json()) == 2
    assert len((await client.get("/api/products", params={"limit": 50})).json()) == 3


@pytest.mark.asyncio
async def test_product_detail_has_images_and_variants(client: AsyncClient, make_product, make_variant):
    product = await make_product(name="Chiffon Teal")
    await make_variant(product.id, color="Teal", size="S")
    await make_variant(product.id, color="Teal", size="M", in_stock=False)
    async with get_session() as session:
        session.add(ProductImage(product_id=product.id, image_url="https://img.example/2.jpg"))
        session.add(ProductImage(product_id=product.id, image_url="https://img.example/1.jpg", is_primary=True))

    response = await client.get(f"/api/products/{product.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Chiffon Teal"
    assert data["price"] == 5000
    assert data["category"] == "lawn_suits"
    assert data["images"][0]["isPrimary"] is True
    assert [(v["size"], v["inStock"]) for v in data["variants"]] == [("S", True), ("M", False)]


@pytest.mark.asyncio
async def test_list_omits_images_and_variants(client: AsyncClient, make_product):
    await make_product()
    item = (await client.get("/api/products")).json()[0]
    assert "images" not in item
    assert "variants" not in item
    assert item["thumbnailImage"]
