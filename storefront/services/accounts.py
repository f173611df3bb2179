"""Account service: registration, credential check, profile updates.

Password storage format: pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import User
from storefront.services.errors import Conflict, NotFound, Unauthorized
from storefront.services.wishlists import get_or_create_wishlist

logger = logging.getLogger("uvicorn.error")

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 120_000
SALT_BYTES = 16

# Profile fields a user may change after registration
PROFILE_FIELDS = (
    "email",
    "full_name",
    "phone",
    "address",
    "city",
    "state",
    "postal_code",
    "country",
)


@dataclass
class Registration:
    username: str
    password: str
    email: str
    full_name: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


def hash_password(password: str, *, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Salted PBKDF2-SHA256 hash in the storage format above."""
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{PBKDF2_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of a password against a stored hash."""
    try:
        algorithm, iterations, salt_hex, digest_hex = stored.split("$")
        if algorithm != PBKDF2_ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            bytes.fromhex(salt_hex),
            int(iterations),
        )
    except ValueError:
        return False
    return hmac.compare_digest(digest.hex(), digest_hex)


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def register_user(session: AsyncSession, data: Registration) -> User:
    """Create an account and its (empty) wishlist.

    Raises:
        Conflict: Username or email already taken.
    """
    username = data.username.strip()
    email = data.email.strip().lower()

    if await get_user_by_username(session, username) is not None:
        raise Conflict("Username already exists", {"field": "username"})
    if await get_user_by_email(session, email) is not None:
        raise Conflict("Email already in use", {"field": "email"})

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(data.password),
        full_name=data.full_name.strip(),
        phone=data.phone,
        address=data.address,
        city=data.city,
        state=data.state,
        postal_code=data.postal_code,
        country=data.country or "Pakistan",
    )
    session.add(user)
    await session.flush()

    await get_or_create_wishlist(session, user.id)

    logger.info("[auth] registered user_id=%s username=%s", user.id, username)
    return user


async def authenticate(session: AsyncSession, username: str, password: str) -> User:
    """Return the user for valid credentials.

    Raises:
        Unauthorized: Unknown username or wrong password.
    """
    user = await get_user_by_username(session, username.strip())
    if user is None or not verify_password(password, user.password_hash):
        logger.info("[auth] login failed username=%s", username)
        raise Unauthorized("Invalid credentials")
    return user


async def update_profile(session: AsyncSession, user_id: int, changes: dict[str, Any]) -> User:
    """Apply profile changes. Username and password are not editable here.

    Raises:
        NotFound: Unknown user.
        Conflict: New email already belongs to another account.
    """
    user = await get_user(session, user_id)
    if user is None:
        raise NotFound("User not found", {"user_id": user_id})

    updates = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
    if "email" in updates:
        if not updates["email"]:
            del updates["email"]
        else:
            updates["email"] = updates["email"].strip().lower()
            other = await get_user_by_email(session, updates["email"])
            if other is not None and other.id != user.id:
                raise Conflict("Email already in use", {"field": "email"})
    if "full_name" in updates and not updates["full_name"]:
        del updates["full_name"]

    for field, value in updates.items():
        setattr(user, field, value)
    await session.flush()
    return user
