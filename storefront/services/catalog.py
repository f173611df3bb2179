"""Catalog read service.

Read-only access to products, images and variants:
- List queries return bare product rows (no images/variants attached;
  callers use Product.thumbnail_image for tiles)
- Single-product lookups return the product with all images and variants
- Variant selection matches the full (color, size) combination

Ordering is always newest first.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import (
    Product,
    ProductCategory,
    ProductCollection,
    ProductImage,
    ProductVariant,
)


@dataclass
class ProductFilters:
    """Composable list filters. None means "do not filter on this"."""

    category: ProductCategory | None = None
    collection: ProductCollection | None = None
    featured: bool | None = None
    best_seller: bool | None = None
    new_arrival: bool | None = None
    search: str | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass
class ProductDetails:
    """A product with its gallery and variants."""

    product: Product
    images: list[ProductImage] = field(default_factory=list)
    variants: list[ProductVariant] = field(default_factory=list)


def unit_price(product: Product, variant: ProductVariant | None = None) -> Decimal:
    """Current unit price: variant override, else sale price, else list price."""
    if variant is not None and variant.price is not None:
        return variant.price
    return product.effective_price


async def list_products(session: AsyncSession, filters: ProductFilters) -> list[Product]:
    """List products matching all given filters, newest first.

    Args:
        session: Database session.
        filters: Filters to apply (unset fields are ignored).

    Returns:
        Product rows for the requested page.
    """
    query = select(Product)

    if filters.category is not None:
        query = query.where(Product.category == filters.category)
    if filters.collection is not None:
        query = query.where(Product.collection == filters.collection)
    if filters.featured is not None:
        query = query.where(Product.featured.is_(filters.featured))
    if filters.best_seller is not None:
        query = query.where(Product.best_seller.is_(filters.best_seller))
    if filters.new_arrival is not None:
        query = query.where(Product.new_arrival.is_(filters.new_arrival))

    term = (filters.search or "").strip()
    if term:
        query = query.where(
            or_(
                Product.name.icontains(term, autoescape=True),
                Product.description.icontains(term, autoescape=True),
            )
        )

    query = query.order_by(Product.created_at.desc(), Product.id.desc())

    if filters.offset:
        query = query.offset(filters.offset)
    if filters.limit is not None:
        query = query.limit(filters.limit)

    result = await session.execute(query)
    return list(result.scalars().all())


async def get_product(session: AsyncSession, product_id: int) -> Product | None:
    """Get a bare product row by id."""
    return await session.get(Product, product_id)


async def get_product_details(session: AsyncSession, product_id: int) -> ProductDetails | None:
    """Get a product with all images and variants.

    Returns:
        ProductDetails, or None if the product does not exist.
    """
    product = await session.get(Product, product_id)
    if product is None:
        return None

    images = await session.execute(
        select(ProductImage)
        .where(ProductImage.product_id == product_id)
        .order_by(ProductImage.is_primary.desc(), ProductImage.id)
    )
    variants = await session.execute(
        select(ProductVariant)
        .where(ProductVariant.product_id == product_id)
        .order_by(ProductVariant.id)
    )
    return ProductDetails(
        product=product,
        images=list(images.scalars().all()),
        variants=list(variants.scalars().all()),
    )


async def get_variant(
    session: AsyncSession,
    variant_id: int,
    product_id: int | None = None,
) -> ProductVariant | None:
    """Get a variant by id, optionally requiring it to belong to a product."""
    variant = await session.get(ProductVariant, variant_id)
    if variant is None:
        return None
    if product_id is not None and variant.product_id != product_id:
        return None
    return variant


async def find_variant(
    session: AsyncSession,
    product_id: int,
    color: str | None,
    size: str | None,
) -> ProductVariant | None:
    """Find the variant matching the full (color, size) combination.

    A missing axis only matches variants that also lack that axis, so a
    color-only request never resolves to a sized variant.
    """
    color = (color or "").strip() or None
    size = (size or "").strip() or None

    query = select(ProductVariant).where(ProductVariant.product_id == product_id)
    query = query.where(
        ProductVariant.color.is_(None) if color is None else ProductVariant.color == color
    )
    query = query.where(
        ProductVariant.size.is_(None) if size is None else ProductVariant.size == size
    )
    result = await session.execute(query)
    return result.scalars().first()


async def get_products_by_ids(session: AsyncSession, ids: Iterable[int]) -> dict[int, Product]:
    """Batch-load products keyed by id."""
    wanted = set(ids)
    if not wanted:
        return {}
    result = await session.execute(select(Product).where(Product.id.in_(wanted)))
    return {p.id: p for p in result.scalars().all()}


async def get_variants_by_ids(
    session: AsyncSession,
    ids: Iterable[int | None],
) -> dict[int, ProductVariant]:
    """Batch-load variants keyed by id (None ids are skipped)."""
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    result = await session.execute(select(ProductVariant).where(ProductVariant.id.in_(wanted)))
    return {v.id: v for v in result.scalars().all()}
