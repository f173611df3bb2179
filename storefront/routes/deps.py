"""Shared route dependencies: session cookie handling and auth guard."""

from fastapi import Depends, Request, Response

from storefront.services.errors import Unauthorized
from storefront.services.identity import (
    SessionContext,
    is_valid_session_id,
    load_session,
    new_session_id,
)
from storefront.settings import get_settings


def set_session_cookie(response: Response, session_id: str) -> None:
    """Attach the session cookie to a response."""
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


async def get_session_context(request: Request, response: Response) -> SessionContext:
    """Resolve the caller's session, issuing a fresh session id if needed."""
    session_id = request.cookies.get(get_settings().session_cookie_name)
    if not is_valid_session_id(session_id):
        session_id = new_session_id()
        set_session_cookie(response, session_id)
        return SessionContext(session_id=session_id)
    return await load_session(session_id)


async def require_user(
    ctx: SessionContext = Depends(get_session_context),
) -> SessionContext:
    """Reject anonymous callers with 401."""
    if not ctx.is_authenticated:
        raise Unauthorized("Unauthorized")
    return ctx
