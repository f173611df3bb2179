"""API routes."""

from fastapi import APIRouter

from storefront.routes import auth, cart, orders, products, wishlist

api_router = APIRouter(prefix="/api")

# Catalog (public)
api_router.include_router(products.router, prefix="/products", tags=["products"])

# Session cart (guest or user)
api_router.include_router(cart.router, prefix="/cart", tags=["cart"])

# Login-gated
api_router.include_router(wishlist.router, prefix="/wishlist", tags=["wishlist"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])

# Accounts
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(auth.user_router, prefix="/user", tags=["user"])
