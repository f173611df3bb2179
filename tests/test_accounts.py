"""Registration, login and profile endpoints."""

import pytest
from httpx import AsyncClient

from storefront.services.accounts import hash_password, verify_password


def test_password_hash_roundtrip():
    stored = hash_password("secret123", iterations=1000)
    assert stored.startswith("pbkdf2_sha256$1000$")
    assert verify_password("secret123", stored)
    assert not verify_password("Secret123", stored)


def test_password_hash_is_salted():
    assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)


def test_verify_rejects_malformed_hash():
    assert not verify_password("x", "not-a-hash")
    assert not verify_password("x", "md5$1$00$00")


@pytest.mark.asyncio
async def test_register_returns_profile_without_password(client: AsyncClient, register):
    user = await register(client, "fatima", city="Lahore", postalCode="54000")

    assert user["username"] == "fatima"
    assert user["email"] == "fatima@example.com"
    assert user["city"] == "Lahore"
    assert user["postalCode"] == "54000"
    assert user["country"] == "Pakistan"
    assert not any("password" in key.lower() for key in user)


@pytest.mark.asyncio
async def test_duplicate_username_or_email_is_409(client: AsyncClient, other_client: AsyncClient, register):
    await register(client, "fatima")

    same_name = await other_client.post(
        "/api/auth/register",
        json={"username": "fatima", "password": "secret123", "email": "new@example.com", "fullName": "F"},
    )
    assert same_name.status_code == 409

    same_email = await other_client.post(
        "/api/auth/register",
        json={"username": "other", "password": "secret123", "email": "FATIMA@example.com", "fullName": "F"},
    )
    assert same_email.status_code == 409
    assert same_email.json()["error"]["detail"] == {"field": "email"}


@pytest.mark.asyncio
async def test_register_validation(client: AsyncClient, db):
    response = await client.post(
        "/api/auth/register",
        json={"username": "ab", "password": "123", "email": "nope", "fullName": ""},
    )
    assert response.status_code == 400
    fields = {tuple(f["loc"])[-1] for f in response.json()["error"]["detail"]["fields"]}
    assert fields == {"username", "password", "email", "fullName"}


@pytest.mark.asyncio
async def test_login_and_bad_credentials(client: AsyncClient, other_client: AsyncClient, register):
    await register(client, "fatima")

    bad = await other_client.post("/api/auth/login", json={"username": "fatima", "password": "wrong-one"})
    assert bad.status_code == 401
    assert (await other_client.get("/api/user")).status_code == 401

    good = await other_client.post("/api/auth/login", json={"username": "fatima", "password": "secret123"})
    assert good.status_code == 200
    me = await other_client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["username"] == "fatima"


@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient, register):
    await register(client, "fatima")

    response = await client.patch(
        "/api/user",
        json={"fullName": "Fatima Khan", "city": "Karachi", "username": "hijack", "password": "x"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["fullName"] == "Fatima Khan"
    assert data["city"] == "Karachi"
    assert data["username"] == "fatima"


@pytest.mark.asyncio
async def test_update_email_conflict(client: AsyncClient, other_client: AsyncClient, register):
    await register(client, "fatima")
    await register(other_client, "maryam")

    response = await other_client.patch("/api/user", json={"email": "fatima@example.com"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_profile_requires_login(client: AsyncClient, db):
    assert (await client.get("/api/user")).status_code == 401
    assert (await client.patch("/api/user", json={"city": "Quetta"})).status_code == 401
