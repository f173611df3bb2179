"""Schemas for catalog endpoints (/api/products)."""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.models import (
    Product,
    ProductCategory,
    ProductCollection,
    ProductImage,
    ProductVariant,
)
from storefront.services.catalog import ProductDetails


class ProductImageOut(BaseModel):
    id: int
    product_id: int = Field(alias="productId")
    image_url: str = Field(alias="imageUrl")
    is_primary: bool = Field(alias="isPrimary")

    model_config = {"populate_by_name": True}


class ProductVariantOut(BaseModel):
    """One (color, size) combination; price overrides the product's when set."""

    id: int
    product_id: int = Field(alias="productId")
    color: str | None = None
    size: str | None = None
    in_stock: bool = Field(alias="inStock")
    price: float | None = None

    model_config = {"populate_by_name": True}


class ProductOut(BaseModel):
    """Bare product row as returned by list queries."""

    id: int
    name: str
    description: str
    sku: str
    price: float
    sale_price: float | None = Field(alias="salePrice", default=None)
    category: ProductCategory
    collection: ProductCollection | None = None
    in_stock: bool = Field(alias="inStock")
    thumbnail_image: str = Field(alias="thumbnailImage")
    featured: bool
    best_seller: bool = Field(alias="bestSeller")
    new_arrival: bool = Field(alias="newArrival")
    average_rating: float = Field(alias="averageRating")
    review_count: int = Field(alias="reviewCount")
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}


class ProductDetailOut(ProductOut):
    """Product with its full gallery and variants."""

    images: list[ProductImageOut] = Field(default_factory=list)
    variants: list[ProductVariantOut] = Field(default_factory=list)


def product_out(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        sku=product.sku,
        price=float(product.price),
        sale_price=float(product.sale_price) if product.sale_price is not None else None,
        category=product.category,
        collection=product.collection,
        in_stock=product.in_stock,
        thumbnail_image=product.thumbnail_image,
        featured=product.featured,
        best_seller=product.best_seller,
        new_arrival=product.new_arrival,
        average_rating=product.average_rating or 0.0,
        review_count=product.review_count or 0,
        created_at=product.created_at,
    )


def image_out(image: ProductImage) -> ProductImageOut:
    return ProductImageOut(
        id=image.id,
        product_id=image.product_id,
        image_url=image.image_url,
        is_primary=image.is_primary,
    )


def variant_out(variant: ProductVariant) -> ProductVariantOut:
    return ProductVariantOut(
        id=variant.id,
        product_id=variant.product_id,
        color=variant.color,
        size=variant.size,
        in_stock=variant.in_stock,
        price=float(variant.price) if variant.price is not None else None,
    )


def product_detail_out(details: ProductDetails) -> ProductDetailOut:
    base = product_out(details.product)
    return ProductDetailOut(
        **base.model_dump(),
        images=[image_out(i) for i in details.images],
        variants=[variant_out(v) for v in details.variants],
    )
