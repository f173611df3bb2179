"""Schemas for cart endpoints (/api/cart)."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from storefront.schemas.catalog import ProductOut, ProductVariantOut, product_out, variant_out
from storefront.services.carts import CartItemView, CartView


class AddCartItemRequest(BaseModel):
    """Add a product to the cart.

    The variant is given either by id or by its (color, size) combination.
    """

    product_id: int = Field(alias="productId", ge=1)
    quantity: int = Field(ge=1)
    variant_id: int | None = Field(alias="variantId", default=None, ge=1)
    color: str | None = Field(default=None, max_length=50)
    size: str | None = Field(default=None, max_length=20)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @model_validator(mode="after")
    def _one_variant_selector(self) -> "AddCartItemRequest":
        if self.variant_id is not None and (self.color or self.size):
            raise ValueError("Give either variantId or color/size, not both")
        return self


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartOut(BaseModel):
    id: int
    user_id: int | None = Field(alias="userId", default=None)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"populate_by_name": True}


class CartItemOut(BaseModel):
    """Cart line; price is the unit price captured when it was added."""

    id: int
    cart_id: int = Field(alias="cartId")
    product_id: int = Field(alias="productId")
    variant_id: int | None = Field(alias="variantId", default=None)
    quantity: int = Field(ge=1)
    price: float
    line_total: float = Field(alias="lineTotal")
    product: ProductOut | None = None
    variant: ProductVariantOut | None = None

    model_config = {"populate_by_name": True}


class CartResponse(BaseModel):
    """Response payload for every /api/cart call."""

    cart: CartOut
    items: list[CartItemOut]
    subtotal: float
    item_count: int = Field(alias="itemCount")

    model_config = {"populate_by_name": True}


def cart_item_out(view: CartItemView) -> CartItemOut:
    item = view.item
    return CartItemOut(
        id=item.id,
        cart_id=item.cart_id,
        product_id=item.product_id,
        variant_id=item.variant_id,
        quantity=item.quantity,
        price=float(item.price),
        line_total=float(view.line_total),
        product=product_out(view.product) if view.product is not None else None,
        variant=variant_out(view.variant) if view.variant is not None else None,
    )


def cart_response(view: CartView) -> CartResponse:
    cart = view.cart
    return CartResponse(
        cart=CartOut(
            id=cart.id,
            user_id=cart.user_id,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        ),
        items=[cart_item_out(i) for i in view.items],
        subtotal=float(view.subtotal),
        item_count=view.item_count,
    )
