"""Account endpoints.

POST  /api/auth/register  - create account, log in, claim the guest cart
POST  /api/auth/login     - log in, claim the guest cart
POST  /api/auth/logout    - forget the session
GET   /api/user           - current profile (auth)
PATCH /api/user           - update profile (auth)

The cart association runs inside the same transaction as the account
lookup; the session is only marked authenticated once that has committed.
Logging in always moves the caller to a new session id (cart included) and
destroys the old one, so an id known before login never becomes authenticated.
"""

from fastapi import APIRouter, Depends, Response

from storefront.routes.deps import (
    clear_session_cookie,
    get_session_context,
    require_user,
    set_session_cookie,
)
from storefront.schemas import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserOut,
    UserUpdateRequest,
)
from storefront.schemas.accounts import user_out
from storefront.services import accounts
from storefront.services.errors import NotFound
from storefront.services.identity import (
    SessionContext,
    associate_guest_cart,
    end_session,
    new_session_id,
    rekey_session_cart,
    start_user_session,
)
from storefront.stores.postgres import get_session

router = APIRouter()
user_router = APIRouter(responses={401: {"model": ErrorResponse}})


@router.post(
    "/register",
    response_model=UserOut,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register(
    body: RegisterRequest,
    response: Response,
    ctx: SessionContext = Depends(get_session_context),
) -> UserOut:
    rotated_id = new_session_id()
    async with get_session() as session:
        user = await accounts.register_user(session, accounts.Registration(**body.model_dump()))
        await associate_guest_cart(session, ctx.session_id, user.id)
        await rekey_session_cart(session, ctx.session_id, rotated_id)
        result = user_out(user)

    await _switch_session(response, ctx.session_id, rotated_id, result.id)
    return result


@router.post(
    "/login",
    response_model=UserOut,
    responses={401: {"model": ErrorResponse}},
)
async def login(
    body: LoginRequest,
    response: Response,
    ctx: SessionContext = Depends(get_session_context),
) -> UserOut:
    rotated_id = new_session_id()
    async with get_session() as session:
        user = await accounts.authenticate(session, body.username, body.password)
        await associate_guest_cart(session, ctx.session_id, user.id)
        await rekey_session_cart(session, ctx.session_id, rotated_id)
        result = user_out(user)

    await _switch_session(response, ctx.session_id, rotated_id, result.id)
    return result


async def _switch_session(response: Response, old_id: str, new_id: str, user_id: int) -> None:
    """Authenticate under a fresh session id; the pre-login id stops working."""
    await start_user_session(new_id, user_id)
    await end_session(old_id)
    set_session_cookie(response, new_id)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    ctx: SessionContext = Depends(get_session_context),
) -> MessageResponse:
    await end_session(ctx.session_id)
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@user_router.get("", response_model=UserOut, responses={404: {"model": ErrorResponse}})
async def get_current_user(ctx: SessionContext = Depends(require_user)) -> UserOut:
    async with get_session() as session:
        user = await accounts.get_user(session, ctx.user_id)
        if user is None:
            raise NotFound("User not found", {"user_id": ctx.user_id})
        return user_out(user)


@user_router.patch(
    "",
    response_model=UserOut,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_current_user(
    body: UserUpdateRequest,
    ctx: SessionContext = Depends(require_user),
) -> UserOut:
    async with get_session() as session:
        user = await accounts.update_profile(
            session, ctx.user_id, body.model_dump(exclude_unset=True)
        )
        return user_out(user)
