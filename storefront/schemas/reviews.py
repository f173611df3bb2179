"""Schemas for product reviews (/api/products/{id}/reviews)."""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.models import Review


class CreateReviewRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=5000)


class ReviewOut(BaseModel):
    id: int
    user_id: int = Field(alias="userId")
    product_id: int = Field(alias="productId")
    rating: int
    comment: str | None = None
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}


def review_out(review: Review) -> ReviewOut:
    return ReviewOut(
        id=review.id,
        user_id=review.user_id,
        product_id=review.product_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )
