"""Wishlist endpoints (authenticated users only).

GET    /api/wishlist                     - saved products
POST   /api/wishlist/items               - save a product (idempotent)
DELETE /api/wishlist/items/{productId}   - unsave a product
"""

from fastapi import APIRouter, Depends, Path

from storefront.routes.deps import require_user
from storefront.schemas import AddWishlistItemRequest, ErrorResponse, WishlistResponse
from storefront.schemas.wishlist import wishlist_response
from storefront.services import wishlists
from storefront.services.errors import NotFound
from storefront.services.identity import SessionContext
from storefront.stores.postgres import get_session

router = APIRouter(responses={401: {"model": ErrorResponse}})


@router.get("", response_model=WishlistResponse)
async def get_wishlist(ctx: SessionContext = Depends(require_user)) -> WishlistResponse:
    async with get_session() as session:
        wishlist = await wishlists.get_or_create_wishlist(session, ctx.user_id)
        return wishlist_response(await wishlists.load_wishlist_view(session, wishlist))


@router.post(
    "/items",
    response_model=WishlistResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
)
async def add_wishlist_item(
    body: AddWishlistItemRequest,
    ctx: SessionContext = Depends(require_user),
) -> WishlistResponse:
    async with get_session() as session:
        wishlist = await wishlists.get_or_create_wishlist(session, ctx.user_id)
        await wishlists.add_item(session, wishlist, body.product_id)
        return wishlist_response(await wishlists.load_wishlist_view(session, wishlist))


@router.delete(
    "/items/{product_id}",
    response_model=WishlistResponse,
    responses={404: {"model": ErrorResponse}},
)
async def remove_wishlist_item(
    product_id: int = Path(ge=1),
    ctx: SessionContext = Depends(require_user),
) -> WishlistResponse:
    async with get_session() as session:
        wishlist = await wishlists.get_or_create_wishlist(session, ctx.user_id)
        if not await wishlists.remove_item(session, wishlist, product_id):
            raise NotFound("Item not in wishlist", {"product_id": product_id})
        return wishlist_response(await wishlists.load_wishlist_view(session, wishlist))
