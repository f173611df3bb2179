"""Cart models.

A cart is keyed by the session id that created it and optionally owned by a
user once that session authenticates. Lines keep the unit price captured at
add-time.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.stores.postgres import Base, utcnow


class Cart(Base):
    """Shopping cart header."""

    __tablename__ = "carts"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)
    # One cart per session; NULL once a merged-away cart is detached
    session_id: Mapped[str | None] = mapped_column(String(64), unique=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Cart {self.id} user={self.user_id}>"


class CartItem(Base):
    """One (product, variant) line in a cart."""

    __tablename__ = "cart_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    cart_id: Mapped[int] = mapped_column(ForeignKey("carts.id"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))
    variant_id: Mapped[int | None] = mapped_column(ForeignKey("product_variants.id"))

    quantity: Mapped[int] = mapped_column(default=1)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))  # unit price at add-time

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<CartItem {self.id} product={self.product_id} x{self.quantity}>"
