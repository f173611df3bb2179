"""Schemas for wishlist endpoints (/api/wishlist)."""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.schemas.catalog import ProductOut, product_out
from storefront.services.wishlists import WishlistView


class AddWishlistItemRequest(BaseModel):
    product_id: int = Field(alias="productId", ge=1)

    model_config = {"populate_by_name": True}


class WishlistOut(BaseModel):
    id: int
    user_id: int = Field(alias="userId")
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}


class WishlistItemOut(BaseModel):
    id: int
    wishlist_id: int = Field(alias="wishlistId")
    product_id: int = Field(alias="productId")
    added_at: datetime = Field(alias="addedAt")
    product: ProductOut | None = None

    model_config = {"populate_by_name": True}


class WishlistResponse(BaseModel):
    wishlist: WishlistOut
    items: list[WishlistItemOut]


def wishlist_response(view: WishlistView) -> WishlistResponse:
    return WishlistResponse(
        wishlist=WishlistOut(
            id=view.wishlist.id,
            user_id=view.wishlist.user_id,
            created_at=view.wishlist.created_at,
        ),
        items=[
            WishlistItemOut(
                id=i.item.id,
                wishlist_id=i.item.wishlist_id,
                product_id=i.item.product_id,
                added_at=i.item.added_at,
                product=product_out(i.product) if i.product is not None else None,
            )
            for i in view.items
        ],
    )
