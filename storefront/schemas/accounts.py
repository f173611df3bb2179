"""Schemas for auth and profile endpoints (/api/auth, /api/user)."""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.models import User


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6, max_length=200)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    full_name: str = Field(alias="fullName", min_length=1, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(alias="postalCode", default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserUpdateRequest(BaseModel):
    """Editable profile fields; unknown keys (e.g. password) are ignored."""

    email: str | None = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    full_name: str | None = Field(alias="fullName", default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(alias="postalCode", default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)

    model_config = {"populate_by_name": True, "extra": "ignore"}


class UserOut(BaseModel):
    """User without credentials."""

    id: int
    username: str
    email: str
    full_name: str = Field(alias="fullName")
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(alias="postalCode", default=None)
    country: str | None = None
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}


class MessageResponse(BaseModel):
    message: str


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        phone=user.phone,
        address=user.address,
        city=user.city,
        state=user.state,
        postal_code=user.postal_code,
        country=user.country,
        created_at=user.created_at,
    )
