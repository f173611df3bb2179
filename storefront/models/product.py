"""Catalog models: products, their images and variants.

A variant is one (color, size) combination of a product. Either axis may be
absent (a color-only or size-only variant), but each combination appears at
most once per product.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from storefront.stores.postgres import Base, utcnow


class ProductCategory(PyEnum):
    """Suit type the product is listed under."""

    LAWN_SUITS = "lawn_suits"
    CHIFFON_SUITS = "chiffon_suits"
    COTTON_SUITS = "cotton_suits"
    EMBROIDERED_SUITS = "embroidered_suits"
    PRINTED_SUITS = "printed_suits"
    BRIDAL_COLLECTION = "bridal_collection"


class ProductCollection(PyEnum):
    """Seasonal / merchandising collection."""

    SUMMER = "summer"
    WEDDING = "wedding"
    FESTIVE = "festive"
    CASUAL = "casual"
    PREMIUM = "premium"
    NEW_ARRIVALS = "new_arrivals"
    BESTSELLERS = "bestsellers"


class Product(Base):
    """Sellable catalog product."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint(
            "sale_price IS NULL OR sale_price < price",
            name="ck_products_sale_below_price",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    sku: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    sale_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # Merchandising
    category: Mapped[ProductCategory] = mapped_column(Enum(ProductCategory), index=True)
    collection: Mapped[ProductCollection | None] = mapped_column(Enum(ProductCollection), index=True)
    featured: Mapped[bool] = mapped_column(default=False)
    best_seller: Mapped[bool] = mapped_column(default=False)
    new_arrival: Mapped[bool] = mapped_column(default=False)
    thumbnail_image: Mapped[str] = mapped_column(Text)

    # Availability; stock_quantity NULL means stock is not tracked
    in_stock: Mapped[bool] = mapped_column(default=True)
    stock_quantity: Mapped[int | None] = mapped_column()

    # Derived from reviews
    average_rating: Mapped[float] = mapped_column(default=0.0)
    review_count: Mapped[int] = mapped_column(default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    @property
    def effective_price(self) -> Decimal:
        """Price a shopper pays for the base product right now."""
        return self.sale_price if self.sale_price is not None else self.price

    def __repr__(self) -> str:
        return f"<Product {self.sku}>"


class ProductImage(Base):
    """Gallery image of a product."""

    __tablename__ = "product_images"

    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), index=True)
    image_url: Mapped[str] = mapped_column(Text)
    is_primary: Mapped[bool] = mapped_column(default=False)

    def __repr__(self) -> str:
        return f"<ProductImage {self.id} product={self.product_id}>"


class ProductVariant(Base):
    """One (color, size) combination of a product."""

    __tablename__ = "product_variants"
    __table_args__ = (
        UniqueConstraint(
            "product_id",
            "color",
            "size",
            name="uq_product_variants_combination",
            postgresql_nulls_not_distinct=True,
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), index=True)

    color: Mapped[str | None] = mapped_column(String(50))
    size: Mapped[str | None] = mapped_column(String(20))

    # Overrides the product price when set
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    in_stock: Mapped[bool] = mapped_column(default=True)
    stock_quantity: Mapped[int | None] = mapped_column()

    def __repr__(self) -> str:
        return f"<ProductVariant {self.id} {self.color}/{self.size}>"
