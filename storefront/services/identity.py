"""Identity/session gate.

Maps a request's session (opaque id + optional authenticated user id) to
exactly one cart, and re-homes carts when a session logs in:

- resolve_cart: session cart if the caller may use it; else the user's
  latest cart adopted by this session; else a new cart.
- associate_guest_cart: run on login/registration. A guest cart is
  reassigned to the user (once). If the user already had a cart from an
  earlier session, both carts' lines are unioned into the session cart and
  the older cart is deleted, so nothing the shopper picked is lost.

Session payloads themselves live in Redis (stores/redis.py).
"""

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Cart, CartItem
from storefront.services.carts import (
    get_cart_by_session,
    get_cart_lines,
    get_latest_user_cart,
    merge_cart_lines,
    replace_lines,
)
from storefront.stores.redis import delete_session_data, get_session_data, set_session_data

logger = logging.getLogger("uvicorn.error")

SESSION_ID_BYTES = 32
MAX_SESSION_ID_LENGTH = 64


@dataclass(frozen=True)
class SessionContext:
    """Who is calling: a session id and, once logged in, a user id."""

    session_id: str
    user_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def new_session_id() -> str:
    """Generate an unguessable session id."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)[:MAX_SESSION_ID_LENGTH]


def is_valid_session_id(value: str | None) -> bool:
    """Cheap shape check for a session id read from a cookie."""
    if not value or len(value) > MAX_SESSION_ID_LENGTH:
        return False
    return all(c.isalnum() or c in "-_" for c in value)


async def load_session(session_id: str) -> SessionContext:
    """Build the SessionContext for a session id from its stored payload."""
    data = await get_session_data(session_id) or {}
    user_id = data.get("user_id")
    return SessionContext(session_id=session_id, user_id=int(user_id) if user_id is not None else None)


async def start_user_session(session_id: str, user_id: int) -> SessionContext:
    """Mark a session as authenticated for a user."""
    await set_session_data(session_id, {"user_id": user_id})
    logger.info("[auth] session started user_id=%s", user_id)
    return SessionContext(session_id=session_id, user_id=user_id)


async def end_session(session_id: str) -> None:
    """Forget everything stored for a session."""
    await delete_session_data(session_id)


async def _detach(session: AsyncSession, cart: Cart, caller_user_id: int | None) -> None:
    """Release a user-owned cart from a session that does not belong to its owner.

    The cart keeps its owner and lines; the owner gets it back on next login.
    """
    logger.warning(
        "[cart] detach cart_id=%s owned by user_id=%s from session of user_id=%s",
        cart.id,
        cart.user_id,
        caller_user_id,
    )
    cart.session_id = None
    await session.flush()


async def rekey_session_cart(session: AsyncSession, old_id: str, new_id: str) -> None:
    """Move the cart keyed by one session id to another (session id rotation)."""
    cart = await get_cart_by_session(session, old_id)
    if cart is not None:
        cart.session_id = new_id
        await session.flush()


async def resolve_cart(session: AsyncSession, ctx: SessionContext) -> Cart:
    """Return the single cart for this session, creating it if needed."""
    cart = await get_cart_by_session(session, ctx.session_id)
    if cart is not None and cart.user_id is not None and cart.user_id != ctx.user_id:
        # Session no longer authenticates the cart's owner (expired, logged out).
        await _detach(session, cart, ctx.user_id)
        cart = None
    if cart is not None:
        return cart

    if ctx.user_id is not None:
        cart = await get_latest_user_cart(session, ctx.user_id)
        if cart is not None:
            logger.info(
                "[cart] adopt cart_id=%s user_id=%s into new session",
                cart.id,
                ctx.user_id,
            )
            cart.session_id = ctx.session_id
            await session.flush()
            return cart

    cart = Cart(user_id=ctx.user_id, session_id=ctx.session_id)
    session.add(cart)
    await session.flush()
    logger.info("[cart] create cart_id=%s user_id=%s", cart.id, ctx.user_id)
    return cart


async def associate_guest_cart(
    session: AsyncSession,
    session_id: str,
    user_id: int,
) -> Cart | None:
    """Attach this session's cart to a user who just authenticated.

    Returns:
        The cart now serving this session, or None if neither a session cart
        nor an earlier user cart exists.
    """
    guest = await get_cart_by_session(session, session_id)

    if guest is not None and guest.user_id is not None and guest.user_id != user_id:
        await _detach(session, guest, user_id)
        guest = None

    prior = await get_latest_user_cart(
        session,
        user_id,
        exclude_cart_id=guest.id if guest is not None else None,
    )

    if guest is None:
        if prior is not None:
            prior.session_id = session_id
            await session.flush()
        return prior

    if prior is not None:
        merged = merge_cart_lines(
            await get_cart_lines(session, guest.id),
            await get_cart_lines(session, prior.id),
        )
        await replace_lines(session, guest, merged)
        await session.execute(delete(CartItem).where(CartItem.cart_id == prior.id))
        await session.execute(delete(Cart).where(Cart.id == prior.id))
        logger.info(
            "[cart] merged cart_id=%s into cart_id=%s user_id=%s lines=%s",
            prior.id,
            guest.id,
            user_id,
            len(merged),
        )

    if guest.user_id is None:
        guest.user_id = user_id
        logger.info("[cart] associate cart_id=%s user_id=%s", guest.id, user_id)

    await session.flush()
    return guest
