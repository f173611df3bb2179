"""Pydantic schemas for API request/response validation."""

from storefront.schemas.common import ErrorDetail, ErrorResponse, FieldError
from storefront.schemas.catalog import (
    ProductDetailOut,
    ProductImageOut,
    ProductOut,
    ProductVariantOut,
)
from storefront.schemas.cart import (
    AddCartItemRequest,
    CartItemOut,
    CartOut,
    CartResponse,
    UpdateCartItemRequest,
)
from storefront.schemas.wishlist import (
    AddWishlistItemRequest,
    WishlistItemOut,
    WishlistOut,
    WishlistResponse,
)
from storefront.schemas.orders import (
    CreateOrderRequest,
    OrderItemOut,
    OrderOut,
    OrderResponse,
    OrderWithItems,
)
from storefront.schemas.accounts import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserOut,
    UserUpdateRequest,
)
from storefront.schemas.reviews import CreateReviewRequest, ReviewOut

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "FieldError",
    "ProductDetailOut",
    "ProductImageOut",
    "ProductOut",
    "ProductVariantOut",
    "AddCartItemRequest",
    "CartItemOut",
    "CartOut",
    "CartResponse",
    "UpdateCartItemRequest",
    "AddWishlistItemRequest",
    "WishlistItemOut",
    "WishlistOut",
    "WishlistResponse",
    "CreateOrderRequest",
    "OrderItemOut",
    "OrderOut",
    "OrderResponse",
    "OrderWithItems",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "UserOut",
    "UserUpdateRequest",
    "CreateReviewRequest",
    "ReviewOut",
]
