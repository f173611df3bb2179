"""Cart endpoints (guest or authenticated session).

GET    /api/cart             - session cart with lines
POST   /api/cart/items       - add a product/variant (merges same line)
PATCH  /api/cart/items/{id}  - set a line's quantity
DELETE /api/cart/items/{id}  - remove a line (missing lines are a no-op)
DELETE /api/cart             - remove every line
"""

from fastapi import APIRouter, Depends, Path

from storefront.routes.deps import get_session_context
from storefront.schemas import (
    AddCartItemRequest,
    CartResponse,
    ErrorResponse,
    UpdateCartItemRequest,
)
from storefront.schemas.cart import cart_response
from storefront.services import carts
from storefront.services.identity import SessionContext, resolve_cart
from storefront.stores.postgres import get_session

router = APIRouter()


@router.get("", response_model=CartResponse)
async def get_cart(ctx: SessionContext = Depends(get_session_context)) -> CartResponse:
    async with get_session() as session:
        cart = await resolve_cart(session, ctx)
        return cart_response(await carts.load_cart_view(session, cart))


@router.post(
    "/items",
    response_model=CartResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_cart_item(
    body: AddCartItemRequest,
    ctx: SessionContext = Depends(get_session_context),
) -> CartResponse:
    """Add to cart. Same product+variant increments the existing line."""
    async with get_session() as session:
        cart = await resolve_cart(session, ctx)
        view = await carts.add_item(
            session,
            cart,
            body.product_id,
            body.quantity,
            body.variant_id,
            color=body.color,
            size=body.size,
        )
        return cart_response(view)


@router.patch(
    "/items/{item_id}",
    response_model=CartResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_cart_item(
    body: UpdateCartItemRequest,
    item_id: int = Path(ge=1),
    ctx: SessionContext = Depends(get_session_context),
) -> CartResponse:
    async with get_session() as session:
        cart = await resolve_cart(session, ctx)
        view = await carts.update_quantity(session, cart, item_id, body.quantity)
        return cart_response(view)


@router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(
    item_id: int = Path(ge=1),
    ctx: SessionContext = Depends(get_session_context),
) -> CartResponse:
    async with get_session() as session:
        cart = await resolve_cart(session, ctx)
        return cart_response(await carts.remove_item(session, cart, item_id))


@router.delete("", response_model=CartResponse)
async def clear_cart(ctx: SessionContext = Depends(get_session_context)) -> CartResponse:
    async with get_session() as session:
        cart = await resolve_cart(session, ctx)
        return cart_response(await carts.clear_cart(session, cart))
