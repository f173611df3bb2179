"""Order endpoints.

POST /api/orders        - check out the session cart (guests allowed)
GET  /api/orders        - the caller's orders, newest first (auth)
GET  /api/orders/{id}   - one order, owner only (auth)
"""

from fastapi import APIRouter, Depends, Path

from storefront.routes.deps import get_session_context, require_user
from storefront.schemas import CreateOrderRequest, ErrorResponse, OrderResponse, OrderWithItems
from storefront.schemas.orders import order_response, order_with_items
from storefront.services.identity import SessionContext, resolve_cart
from storefront.services.orders import (
    CheckoutDetails,
    get_user_order,
    list_user_orders,
    place_order,
)
from storefront.stores.postgres import get_session

router = APIRouter()


@router.post(
    "",
    response_model=OrderResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_order(
    body: CreateOrderRequest,
    ctx: SessionContext = Depends(get_session_context),
) -> OrderResponse:
    """Turn the session cart into a pending order and empty the cart."""
    async with get_session() as session:
        cart = await resolve_cart(session, ctx)
        view = await place_order(
            session,
            cart,
            CheckoutDetails(
                shipping_address=body.shipping_address,
                billing_address=body.billing_address,
                payment_method=body.payment_method,
            ),
            user_id=ctx.user_id,
            session_id=ctx.session_id,
        )
        return order_response(view)


@router.get(
    "",
    response_model=list[OrderWithItems],
    responses={401: {"model": ErrorResponse}},
)
async def get_orders(ctx: SessionContext = Depends(require_user)) -> list[OrderWithItems]:
    async with get_session() as session:
        return [order_with_items(v) for v in await list_user_orders(session, ctx.user_id)]


@router.get(
    "/{order_id}",
    response_model=OrderWithItems,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_order(
    order_id: int = Path(ge=1),
    ctx: SessionContext = Depends(require_user),
) -> OrderWithItems:
    async with get_session() as session:
        return order_with_items(await get_user_order(session, order_id, ctx.user_id))
