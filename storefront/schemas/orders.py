"""Schemas for order endpoints (/api/orders)."""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.models import OrderStatus
from storefront.schemas.catalog import ProductOut, ProductVariantOut, product_out, variant_out
from storefront.services.orders import OrderView


class CreateOrderRequest(BaseModel):
    """Checkout form. Payment method is recorded as a label only."""

    shipping_address: str = Field(alias="shippingAddress", min_length=1, max_length=2000)
    billing_address: str = Field(alias="billingAddress", min_length=1, max_length=2000)
    payment_method: str = Field(alias="paymentMethod", min_length=1, max_length=50)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}


class OrderItemOut(BaseModel):
    id: int
    order_id: int = Field(alias="orderId")
    product_id: int = Field(alias="productId")
    variant_id: int | None = Field(alias="variantId", default=None)
    quantity: int
    price: float
    line_total: float = Field(alias="lineTotal")
    product: ProductOut | None = None
    variant: ProductVariantOut | None = None

    model_config = {"populate_by_name": True}


class OrderOut(BaseModel):
    id: int
    user_id: int | None = Field(alias="userId", default=None)
    status: OrderStatus
    total: float
    shipping_address: str = Field(alias="shippingAddress")
    billing_address: str = Field(alias="billingAddress")
    payment_method: str = Field(alias="paymentMethod")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"populate_by_name": True}


class OrderResponse(BaseModel):
    """Response payload for POST /api/orders."""

    order: OrderOut
    items: list[OrderItemOut]


class OrderWithItems(OrderOut):
    """Order detail as listed under GET /api/orders."""

    items: list[OrderItemOut] = Field(default_factory=list)


def _order_out(view: OrderView) -> OrderOut:
    order = view.order
    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        status=order.status,
        total=float(order.total),
        shipping_address=order.shipping_address,
        billing_address=order.billing_address,
        payment_method=order.payment_method,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _items_out(view: OrderView) -> list[OrderItemOut]:
    return [
        OrderItemOut(
            id=i.item.id,
            order_id=i.item.order_id,
            product_id=i.item.product_id,
            variant_id=i.item.variant_id,
            quantity=i.item.quantity,
            price=float(i.item.price),
            line_total=float(i.line_total),
            product=product_out(i.product) if i.product is not None else None,
            variant=variant_out(i.variant) if i.variant is not None else None,
        )
        for i in view.items
    ]


def order_response(view: OrderView) -> OrderResponse:
    return OrderResponse(order=_order_out(view), items=_items_out(view))


def order_with_items(view: OrderView) -> OrderWithItems:
    return OrderWithItems(**_order_out(view).model_dump(), items=_items_out(view))
