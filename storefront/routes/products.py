"""Catalog endpoints.

GET  /api/products                     - filtered, paginated list (newest first)
GET  /api/products/{id}                - product with images and variants
GET  /api/products/{id}/reviews        - reviews, newest first
POST /api/products/{id}/reviews        - add review (auth)

Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, Depends, Path, Query

from storefront.models import ProductCategory, ProductCollection
from storefront.schemas import (
    CreateReviewRequest,
    ErrorResponse,
    ProductDetailOut,
    ProductOut,
    ReviewOut,
)
from storefront.schemas.catalog import product_detail_out, product_out
from storefront.schemas.reviews import review_out
from storefront.services.catalog import ProductFilters, get_product_details, list_products
from storefront.services.errors import NotFound
from storefront.services.identity import SessionContext
from storefront.services.reviews import create_review, list_product_reviews
from storefront.routes.deps import require_user
from storefront.settings import get_settings
from storefront.stores.postgres import get_session

router = APIRouter()


@router.get("", response_model=list[ProductOut])
async def get_products(
    category: ProductCategory | None = Query(default=None, description="Suit category"),
    collection: ProductCollection | None = Query(default=None, description="Collection"),
    featured: bool | None = Query(default=None),
    best_seller: bool | None = Query(default=None, alias="bestSeller"),
    new_arrival: bool | None = Query(default=None, alias="newArrival"),
    search: str | None = Query(
        default=None,
        max_length=200,
        description="Case-insensitive match against name or description",
    ),
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> list[ProductOut]:
    """List products. Images/variants are not attached; use thumbnailImage."""
    settings = get_settings()
    filters = ProductFilters(
        category=category,
        collection=collection,
        featured=featured,
        best_seller=best_seller,
        new_arrival=new_arrival,
        search=search,
        limit=min(limit or settings.default_page_size, settings.max_page_size),
        offset=offset,
    )
    async with get_session() as session:
        products = await list_products(session, filters)
        return [product_out(p) for p in products]


@router.get(
    "/{product_id}",
    response_model=ProductDetailOut,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(product_id: int = Path(ge=1)) -> ProductDetailOut:
    """Get a single product with its images and variants."""
    async with get_session() as session:
        details = await get_product_details(session, product_id)
        if details is None:
            raise NotFound("Product not found", {"product_id": product_id})
        return product_detail_out(details)


@router.get("/{product_id}/reviews", response_model=list[ReviewOut])
async def get_product_reviews(product_id: int = Path(ge=1)) -> list[ReviewOut]:
    async with get_session() as session:
        reviews = await list_product_reviews(session, product_id)
        return [review_out(r) for r in reviews]


@router.post(
    "/{product_id}/reviews",
    response_model=ReviewOut,
    status_code=201,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_product_review(
    body: CreateReviewRequest,
    product_id: int = Path(ge=1),
    ctx: SessionContext = Depends(require_user),
) -> ReviewOut:
    """Add a review; the product's rating aggregate is refreshed atomically."""
    async with get_session() as session:
        review = await create_review(
            session,
            user_id=ctx.user_id,
            product_id=product_id,
            rating=body.rating,
            comment=body.comment,
        )
        return review_out(review)
