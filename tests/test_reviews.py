import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_review_requires_login(client: AsyncClient, make_product):
    product = await make_product()
    response = await client.post(f"/api/products/{product.id}/reviews", json={"rating": 5})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_reviews_update_rating_aggregate(client: AsyncClient, make_product, register):
    await register(client)
    product = await make_product()

    for rating, comment in [(5, "Lovely print"), (4, None), (2, "  ")]:
        response = await client.post(
            f"/api/products/{product.id}/reviews",
            json={"rating": rating, "comment": comment},
        )
        assert response.status_code == 201

    detail = (await client.get(f"/api/products/{product.id}")).json()
    assert detail["reviewCount"] == 3
    assert detail["averageRating"] == pytest.approx(3.67)

    reviews = (await client.get(f"/api/products/{product.id}/reviews")).json()
    assert len(reviews) == 3
    assert reviews[0]["rating"] == 2
    assert reviews[0]["comment"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_rating_out_of_range_is_400(client: AsyncClient, make_product, register, rating: int):
    await register(client)
    product = await make_product()

    response = await client.post(f"/api/products/{product.id}/reviews", json={"rating": rating})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_review_unknown_product_is_404(client: AsyncClient, register, db):
    await register(client)
    response = await client.post("/api/products/4040/reviews", json={"rating": 3})
    assert response.status_code == 404
