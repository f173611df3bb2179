"""Order materializer.

Checkout turns the session cart into an immutable order:
1. Reject an empty cart or blank address/payment fields
2. Re-validate stock flags and lock the product/variant rows involved
3. Price every line per the configured PricingPolicy
4. Decrement tracked stock (stock_quantity NOT NULL), rejecting oversells
5. Insert the order + items, then empty the cart

All steps share the caller's session, so they commit or roll back together.
Orders are never modified afterwards.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import (
    Cart,
    CartItem,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductVariant,
)
from storefront.services.carts import get_cart_items
from storefront.services.catalog import get_products_by_ids, get_variants_by_ids, unit_price
from storefront.services.errors import EmptyCart, Forbidden, NotFound, OutOfStock, ValidationFailed
from storefront.settings import PricingPolicy, get_settings

logger = logging.getLogger("uvicorn.error")


@dataclass
class CheckoutDetails:
    shipping_address: str
    billing_address: str
    payment_method: str


@dataclass
class OrderItemView:
    item: OrderItem
    product: Product | None
    variant: ProductVariant | None

    @property
    def line_total(self) -> Decimal:
        return self.item.price * self.item.quantity


@dataclass
class OrderView:
    order: Order
    items: list[OrderItemView]


def _validate_details(details: CheckoutDetails) -> CheckoutDetails:
    cleaned = CheckoutDetails(
        shipping_address=(details.shipping_address or "").strip(),
        billing_address=(details.billing_address or "").strip(),
        payment_method=(details.payment_method or "").strip(),
    )
    missing = [name for name, value in vars(cleaned).items() if not value]
    if missing:
        raise ValidationFailed(
            "Shipping address, billing address, and payment method are required",
            {"missing": missing},
        )
    return cleaned


async def _lock_catalog_rows(
    session: AsyncSession,
    items: list[CartItem],
) -> tuple[dict[int, Product], dict[int, ProductVariant]]:
    """Load products/variants for the lines with row locks (no-op on SQLite)."""
    product_ids = {i.product_id for i in items}
    variant_ids = {i.variant_id for i in items if i.variant_id is not None}

    products_result = await session.execute(
        select(Product)
        .where(Product.id.in_(product_ids))
        .order_by(Product.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    products = {p.id: p for p in products_result.scalars().all()}

    variants: dict[int, ProductVariant] = {}
    if variant_ids:
        variants_result = await session.execute(
            select(ProductVariant)
            .where(ProductVariant.id.in_(variant_ids))
            .order_by(ProductVariant.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        variants = {v.id: v for v in variants_result.scalars().all()}
    return products, variants


def _stock_holder(product: Product, variant: ProductVariant | None) -> Product | ProductVariant | None:
    """Row whose stock_quantity a line draws from (variant stock wins)."""
    if variant is not None and variant.stock_quantity is not None:
        return variant
    if product.stock_quantity is not None:
        return product
    return None


def _reserve_stock(
    lines: list[tuple[CartItem, Product, ProductVariant | None]],
) -> None:
    """Check then decrement tracked stock for all lines, all-or-nothing."""
    demand: dict[tuple[str, int], int] = defaultdict(int)
    holders: dict[tuple[str, int], Product | ProductVariant] = {}
    for item, product, variant in lines:
        holder = _stock_holder(product, variant)
        if holder is None:
            continue
        key = (type(holder).__name__, holder.id)
        demand[key] += item.quantity
        holders[key] = holder

    for key, wanted in demand.items():
        holder = holders[key]
        if wanted > holder.stock_quantity:
            raise OutOfStock(
                "Not enough stock to place this order",
                {
                    "kind": key[0],
                    "id": holder.id,
                    "requested": wanted,
                    "available": holder.stock_quantity,
                },
            )

    for key, wanted in demand.items():
        holder = holders[key]
        holder.stock_quantity -= wanted
        if holder.stock_quantity == 0:
            holder.in_stock = False


async def place_order(
    session: AsyncSession,
    cart: Cart,
    details: CheckoutDetails,
    *,
    user_id: int | None,
    session_id: str | None,
    policy: PricingPolicy | None = None,
) -> OrderView:
    """Materialize the cart into a pending order and empty the cart.

    Args:
        session: Database session (the whole checkout is one transaction).
        cart: Cart to check out.
        details: Shipping/billing/payment labels.
        user_id: Owner of the order, None for guests.
        session_id: Session that placed the order.
        policy: Pricing policy; defaults to settings.order_pricing_policy.

    Returns:
        The created order with its items.

    Raises:
        EmptyCart: Cart has no lines.
        ValidationFailed: Missing address or payment method.
        NotFound: A line references a product/variant that no longer exists.
        OutOfStock: A product/variant is out of stock or would be oversold.
    """
    policy = policy or get_settings().order_pricing_policy

    items = await get_cart_items(session, cart.id)
    if not items:
        raise EmptyCart("Cannot create order with empty cart", {"cart_id": cart.id})
    details = _validate_details(details)

    products, variants = await _lock_catalog_rows(session, items)

    lines: list[tuple[CartItem, Product, ProductVariant | None]] = []
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            raise NotFound("Product not found", {"product_id": item.product_id})
        variant = None
        if item.variant_id is not None:
            variant = variants.get(item.variant_id)
            if variant is None:
                raise NotFound("Variant not found", {"variant_id": item.variant_id})
        if not product.in_stock or (variant is not None and not variant.in_stock):
            raise OutOfStock(
                "Product is out of stock",
                {"product_id": item.product_id, "variant_id": item.variant_id},
            )
        lines.append((item, product, variant))

    _reserve_stock(lines)

    priced: list[tuple[CartItem, Decimal]] = []
    for item, product, variant in lines:
        price = item.price if policy == PricingPolicy.CART else unit_price(product, variant)
        priced.append((item, price))

    total = sum((price * item.quantity for item, price in priced), Decimal("0"))

    order = Order(
        user_id=user_id,
        session_id=session_id,
        status=OrderStatus.PENDING,
        total=total,
        shipping_address=details.shipping_address,
        billing_address=details.billing_address,
        payment_method=details.payment_method,
    )
    session.add(order)
    await session.flush()

    for item, price in priced:
        session.add(
            OrderItem(
                order_id=order.id,
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                price=price,
            )
        )

    await session.execute(delete(CartItem).where(CartItem.cart_id == cart.id))
    await session.flush()

    logger.info(
        "[orders] placed order_id=%s cart_id=%s user_id=%s lines=%s total=%s policy=%s",
        order.id,
        cart.id,
        user_id,
        len(priced),
        total,
        policy.value,
    )
    return await load_order_view(session, order)


async def load_order_view(session: AsyncSession, order: Order) -> OrderView:
    """Order with its items denormalized."""
    result = await session.execute(
        select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.id)
    )
    items = list(result.scalars().all())
    products = await get_products_by_ids(session, (i.product_id for i in items))
    variants = await get_variants_by_ids(session, (i.variant_id for i in items))
    return OrderView(
        order=order,
        items=[
            OrderItemView(
                item=i,
                product=products.get(i.product_id),
                variant=variants.get(i.variant_id) if i.variant_id else None,
            )
            for i in items
        ],
    )


async def list_user_orders(session: AsyncSession, user_id: int) -> list[OrderView]:
    """A user's orders, newest first, each with items."""
    result = await session.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return [await load_order_view(session, order) for order in result.scalars().all()]


async def get_user_order(session: AsyncSession, order_id: int, user_id: int) -> OrderView:
    """Fetch one order, only for its owner.

    Raises:
        NotFound: No such order.
        Forbidden: Order belongs to someone else (or to a guest session).
    """
    order = await session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found", {"order_id": order_id})
    if order.user_id != user_id:
        raise Forbidden("Not authorized to view this order", {"order_id": order_id})
    return await load_order_view(session, order)
