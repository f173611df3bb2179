"""SQLAlchemy ORM models.

Models represent database tables:
- users: Registered shoppers
- products / product_images / product_variants: Catalog
- carts / cart_items: Session- or user-owned carts
- wishlists / wishlist_items: Per-user saved products
- orders / order_items: Immutable checkout snapshots
- reviews: Ratings feeding products.average_rating
"""

from storefront.models.user import User
from storefront.models.product import (
    Product,
    ProductCategory,
    ProductCollection,
    ProductImage,
    ProductVariant,
)
from storefront.models.cart import Cart, CartItem
from storefront.models.wishlist import Wishlist, WishlistItem
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.review import Review

__all__ = [
    "User",
    "Product",
    "ProductCategory",
    "ProductCollection",
    "ProductImage",
    "ProductVariant",
    "Cart",
    "CartItem",
    "Wishlist",
    "WishlistItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Review",
]
