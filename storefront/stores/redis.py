"""Redis store for server-side session data.

Only the opaque session id travels to the browser (in a cookie); the
payload it points to (currently the authenticated user id) lives here as a
JSON document under session:<id>, expiring after SESSION_TTL_SECONDS.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from storefront.settings import get_settings

# Key prefixes
PREFIX_SESSION = "session:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Fail fast on a bad URL or unreachable server.
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


def _session_key(session_id: str) -> str:
    return f"{PREFIX_SESSION}{session_id}"


async def get_json(key: str) -> dict[str, Any] | None:
    """Read a JSON document, None when the key is missing or expired."""
    value = await _get_redis().get(key)
    return json.loads(value) if value else None


async def set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Write a JSON document with a TTL in seconds."""
    await _get_redis().setex(key, ttl, json.dumps(value))


# ============================================================
# Session payloads
# ============================================================


async def get_session_data(session_id: str) -> dict[str, Any] | None:
    """Load the payload stored for a session id."""
    return await get_json(_session_key(session_id))


async def set_session_data(session_id: str, data: dict[str, Any]) -> None:
    """Store a session payload, (re)starting its TTL."""
    await set_json(_session_key(session_id), data, get_settings().session_ttl_seconds)


async def delete_session_data(session_id: str) -> None:
    """Destroy a session payload."""
    await _get_redis().delete(_session_key(session_id))
