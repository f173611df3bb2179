"""Cart store service.

Operations on a resolved cart (see services/identity.py for how a request
gets its cart):
- add_item: validate product/variant stock, merge into an existing
  (product, variant) line or insert a new one with the price frozen now
- update_quantity / remove_item / clear_cart
- merge_cart_lines: pure union of two carts' lines (used on login)

Every mutation returns the reloaded CartView so routes answer in one trip.
Nothing here commits; the caller's get_session() block is the transaction.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Cart, CartItem, Product, ProductVariant
from storefront.services.catalog import (
    find_variant,
    get_product,
    get_products_by_ids,
    get_variant,
    get_variants_by_ids,
    unit_price,
)
from storefront.services.errors import NotFound, OutOfStock, ValidationFailed
from storefront.stores.postgres import utcnow

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class CartLine:
    """Storage-free view of a cart line, used for merging."""

    product_id: int
    variant_id: int | None
    quantity: int
    price: Decimal

    @property
    def key(self) -> tuple[int, int | None]:
        return (self.product_id, self.variant_id)


@dataclass
class CartItemView:
    """Cart line denormalized with product/variant for display."""

    item: CartItem
    product: Product | None
    variant: ProductVariant | None

    @property
    def line_total(self) -> Decimal:
        return self.item.price * self.item.quantity


@dataclass
class CartView:
    """Cart header plus all of its lines."""

    cart: Cart
    items: list[CartItemView]

    @property
    def subtotal(self) -> Decimal:
        return sum((i.line_total for i in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(i.item.quantity for i in self.items)


def merge_cart_lines(
    guest_lines: Iterable[CartLine],
    user_lines: Iterable[CartLine],
) -> list[CartLine]:
    """Union two carts' lines.

    Lines with the same (product_id, variant_id) collapse into one whose
    quantity is the sum. The user's existing line keeps its captured price;
    guest-only lines keep theirs. Order: user lines first, then new guest lines.

    Args:
        guest_lines: Lines of the cart built before logging in.
        user_lines: Lines of the user's previously saved cart.

    Returns:
        Merged lines, at most one per (product_id, variant_id).
    """
    merged: dict[tuple[int, int | None], CartLine] = {}
    for line in [*user_lines, *guest_lines]:
        existing = merged.get(line.key)
        if existing is None:
            merged[line.key] = line
        else:
            merged[line.key] = CartLine(
                product_id=existing.product_id,
                variant_id=existing.variant_id,
                quantity=existing.quantity + line.quantity,
                price=existing.price,
            )
    return list(merged.values())


# ============================================================
# Queries
# ============================================================


async def get_cart_by_session(session: AsyncSession, session_id: str) -> Cart | None:
    """Find the cart keyed by a session id."""
    result = await session.execute(select(Cart).where(Cart.session_id == session_id))
    return result.scalars().first()


async def get_latest_user_cart(
    session: AsyncSession,
    user_id: int,
    exclude_cart_id: int | None = None,
) -> Cart | None:
    """Most recently touched cart owned by a user."""
    query = select(Cart).where(Cart.user_id == user_id)
    if exclude_cart_id is not None:
        query = query.where(Cart.id != exclude_cart_id)
    query = query.order_by(Cart.updated_at.desc(), Cart.id.desc()).limit(1)
    result = await session.execute(query)
    return result.scalars().first()


async def get_cart_items(session: AsyncSession, cart_id: int) -> list[CartItem]:
    """All lines of a cart in insertion order."""
    result = await session.execute(
        select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id)
    )
    return list(result.scalars().all())


async def get_cart_lines(session: AsyncSession, cart_id: int) -> list[CartLine]:
    """Cart lines as plain CartLine values."""
    return [
        CartLine(
            product_id=item.product_id,
            variant_id=item.variant_id,
            quantity=item.quantity,
            price=item.price,
        )
        for item in await get_cart_items(session, cart_id)
    ]


async def load_cart_view(session: AsyncSession, cart: Cart) -> CartView:
    """Reload a cart with every line denormalized."""
    items = await get_cart_items(session, cart.id)
    products = await get_products_by_ids(session, (i.product_id for i in items))
    variants = await get_variants_by_ids(session, (i.variant_id for i in items))
    return CartView(
        cart=cart,
        items=[
            CartItemView(
                item=item,
                product=products.get(item.product_id),
                variant=variants.get(item.variant_id) if item.variant_id else None,
            )
            for item in items
        ],
    )


# ============================================================
# Mutations
# ============================================================


def _touch(cart: Cart) -> None:
    cart.updated_at = utcnow()


def _require_quantity(quantity: int) -> None:
    if quantity < 1:
        raise ValidationFailed("Quantity must be at least 1", {"quantity": quantity})


async def add_item(
    session: AsyncSession,
    cart: Cart,
    product_id: int,
    quantity: int,
    variant_id: int | None = None,
    *,
    color: str | None = None,
    size: str | None = None,
) -> CartView:
    """Add a product (and optional variant) to a cart.

    The variant is selected by id, or by its full (color, size) combination
    when no id is given.

    Raises:
        ValidationFailed: quantity < 1.
        NotFound: Unknown product, or no variant of this product matches.
        OutOfStock: Product or variant is flagged out of stock.
    """
    _require_quantity(quantity)
    color = (color or "").strip() or None
    size = (size or "").strip() or None

    product = await get_product(session, product_id)
    if product is None:
        raise NotFound("Product not found", {"product_id": product_id})
    if not product.in_stock:
        raise OutOfStock("Product is out of stock", {"product_id": product_id})

    variant: ProductVariant | None = None
    if variant_id is None and (color or size):
        variant = await find_variant(session, product_id, color, size)
        if variant is None:
            raise NotFound(
                "Variant not found",
                {"product_id": product_id, "color": color, "size": size},
            )
        variant_id = variant.id
    elif variant_id is not None:
        variant = await get_variant(session, variant_id, product_id=product_id)
        if variant is None:
            raise NotFound("Variant not found", {"product_id": product_id, "variant_id": variant_id})

    if variant is not None and not variant.in_stock:
        raise OutOfStock(
            "Selected variant is out of stock",
            {"product_id": product_id, "variant_id": variant_id},
        )

    query = select(CartItem).where(
        CartItem.cart_id == cart.id,
        CartItem.product_id == product_id,
    )
    query = query.where(
        CartItem.variant_id.is_(None) if variant_id is None else CartItem.variant_id == variant_id
    )
    existing = (await session.execute(query)).scalars().first()

    if existing is not None:
        existing.quantity += quantity
        logger.info(
            "[cart] merge cart_id=%s item_id=%s product_id=%s variant_id=%s quantity=%s",
            cart.id,
            existing.id,
            product_id,
            variant_id,
            existing.quantity,
        )
    else:
        item = CartItem(
            cart_id=cart.id,
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            price=unit_price(product, variant),
        )
        session.add(item)
        await session.flush()
        logger.info(
            "[cart] add cart_id=%s item_id=%s product_id=%s variant_id=%s quantity=%s price=%s",
            cart.id,
            item.id,
            product_id,
            variant_id,
            quantity,
            item.price,
        )

    _touch(cart)
    return await load_cart_view(session, cart)


async def update_quantity(
    session: AsyncSession,
    cart: Cart,
    item_id: int,
    quantity: int,
) -> CartView:
    """Replace the quantity of a line in this cart.

    Raises:
        ValidationFailed: quantity < 1.
        NotFound: No such line in this cart.
    """
    _require_quantity(quantity)

    result = await session.execute(
        select(CartItem).where(CartItem.id == item_id, CartItem.cart_id == cart.id)
    )
    item = result.scalars().first()
    if item is None:
        raise NotFound("Cart item not found", {"item_id": item_id})

    item.quantity = quantity
    _touch(cart)
    logger.info("[cart] update cart_id=%s item_id=%s quantity=%s", cart.id, item_id, quantity)
    return await load_cart_view(session, cart)


async def remove_item(session: AsyncSession, cart: Cart, item_id: int) -> CartView:
    """Delete a line from this cart. Missing lines are a no-op."""
    result = await session.execute(
        delete(CartItem).where(CartItem.id == item_id, CartItem.cart_id == cart.id)
    )
    removed = (result.rowcount or 0) > 0
    if removed:
        _touch(cart)
    logger.info("[cart] remove cart_id=%s item_id=%s removed=%s", cart.id, item_id, removed)
    return await load_cart_view(session, cart)


async def clear_cart(session: AsyncSession, cart: Cart) -> CartView:
    """Delete every line of a cart."""
    await session.execute(delete(CartItem).where(CartItem.cart_id == cart.id))
    _touch(cart)
    logger.info("[cart] clear cart_id=%s", cart.id)
    return CartView(cart=cart, items=[])


async def replace_lines(session: AsyncSession, cart: Cart, lines: Iterable[CartLine]) -> None:
    """Overwrite a cart's lines with the given ones."""
    await session.execute(delete(CartItem).where(CartItem.cart_id == cart.id))
    for line in lines:
        session.add(
            CartItem(
                cart_id=cart.id,
                product_id=line.product_id,
                variant_id=line.variant_id,
                quantity=line.quantity,
                price=line.price,
            )
        )
    _touch(cart)
    await session.flush()
