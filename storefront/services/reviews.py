"""Review service.

Creating a review recomputes the product's average rating and review count
over all of its reviews in the same transaction as the insert.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Product, Review
from storefront.services.errors import NotFound, ValidationFailed

logger = logging.getLogger("uvicorn.error")

MIN_RATING = 1
MAX_RATING = 5


async def list_product_reviews(session: AsyncSession, product_id: int) -> list[Review]:
    """Reviews for a product, newest first."""
    result = await session.execute(
        select(Review)
        .where(Review.product_id == product_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(result.scalars().all())


async def refresh_product_rating(session: AsyncSession, product: Product) -> None:
    """Recompute average_rating / review_count from scratch."""
    result = await session.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(
            Review.product_id == product.id
        )
    )
    avg, count = result.one()
    product.average_rating = round(float(avg), 2) if avg is not None else 0.0
    product.review_count = int(count or 0)


async def create_review(
    session: AsyncSession,
    *,
    user_id: int,
    product_id: int,
    rating: int,
    comment: str | None = None,
) -> Review:
    """Add a review and refresh the product's rating aggregate.

    Raises:
        NotFound: Unknown product.
        ValidationFailed: Rating outside 1..5.
    """
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationFailed(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}",
            {"rating": rating},
        )

    product = await session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found", {"product_id": product_id})

    review = Review(
        user_id=user_id,
        product_id=product_id,
        rating=rating,
        comment=(comment or "").strip() or None,
    )
    session.add(review)
    await session.flush()

    await refresh_product_rating(session, product)
    await session.flush()

    logger.info(
        "[reviews] create review_id=%s product_id=%s rating=%s average=%s count=%s",
        review.id,
        product_id,
        rating,
        product.average_rating,
        product.review_count,
    )
    return review
