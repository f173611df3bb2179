"""Wishlist store service (registered users only)."""

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Product, Wishlist, WishlistItem
from storefront.services.catalog import get_product, get_products_by_ids
from storefront.services.errors import NotFound

logger = logging.getLogger("uvicorn.error")


@dataclass
class WishlistItemView:
    item: WishlistItem
    product: Product | None


@dataclass
class WishlistView:
    wishlist: Wishlist
    items: list[WishlistItemView]


async def get_or_create_wishlist(session: AsyncSession, user_id: int) -> Wishlist:
    """Return the user's wishlist, creating it on first use."""
    result = await session.execute(select(Wishlist).where(Wishlist.user_id == user_id))
    wishlist = result.scalars().first()
    if wishlist is None:
        wishlist = Wishlist(user_id=user_id)
        session.add(wishlist)
        await session.flush()
    return wishlist


async def load_wishlist_view(session: AsyncSession, wishlist: Wishlist) -> WishlistView:
    """Wishlist with each item's product attached."""
    result = await session.execute(
        select(WishlistItem)
        .where(WishlistItem.wishlist_id == wishlist.id)
        .order_by(WishlistItem.added_at.desc(), WishlistItem.id.desc())
    )
    items = list(result.scalars().all())
    products = await get_products_by_ids(session, (i.product_id for i in items))
    return WishlistView(
        wishlist=wishlist,
        items=[WishlistItemView(item=i, product=products.get(i.product_id)) for i in items],
    )


async def add_item(session: AsyncSession, wishlist: Wishlist, product_id: int) -> WishlistItem:
    """Save a product. Adding an already-saved product returns the existing row.

    Raises:
        NotFound: Unknown product.
    """
    if await get_product(session, product_id) is None:
        raise NotFound("Product not found", {"product_id": product_id})

    result = await session.execute(
        select(WishlistItem).where(
            WishlistItem.wishlist_id == wishlist.id,
            WishlistItem.product_id == product_id,
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        return existing

    item = WishlistItem(wishlist_id=wishlist.id, product_id=product_id)
    session.add(item)
    await session.flush()
    logger.info("[wishlist] add wishlist_id=%s product_id=%s", wishlist.id, product_id)
    return item


async def remove_item(session: AsyncSession, wishlist: Wishlist, product_id: int) -> bool:
    """Remove a saved product.

    Returns:
        True if a row was deleted, False if the product was not saved.
    """
    result = await session.execute(
        delete(WishlistItem).where(
            WishlistItem.wishlist_id == wishlist.id,
            WishlistItem.product_id == product_id,
        )
    )
    removed = (result.rowcount or 0) > 0
    logger.info(
        "[wishlist] remove wishlist_id=%s product_id=%s removed=%s",
        wishlist.id,
        product_id,
        removed,
    )
    return removed
