"""
/api/auth endpoints.
"""
import pytest
from sqlalchemy import select

from conftest import PASSWORD, auth_headers
from imagifine.models.user import User


async def _otp_for(session_factory, user_id: str) -> str:
    async with session_factory() as session:
        return (await session.execute(select(User.otp_code).where(User.id == user_id))).scalar_one()


@pytest.mark.asyncio
async def test_register_verify_and_fetch_user(client, notifier, session_factory) -> None:
    resp = await client.post(
        "/api/auth/register",
        json={"username": "dave", "email": "dave@example.com", "password": PASSWORD},
    )
    assert resp.status_code == 201
    user_id = resp.json()["userId"]
    assert notifier.sent[0]["to"] == "dave@example.com"

    otp = await _otp_for(session_factory, user_id)
    resp = await client.post("/api/auth/verify-otp", json={"userId": user_id, "otp": otp})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Email verified successfully"
    assert body["user"] == {"id": user_id, "username": "dave", "email": "dave@example.com", "credits": 10}

    resp = await client.get("/api/auth/user", headers={"Authorization": f"Bearer {body['token']}"})
    assert resp.status_code == 200
    me = resp.json()
    assert me["isVerified"] is True
    assert "passwordHash" not in me
    assert "otpCode" not in me


@pytest.mark.asyncio
async def test_register_again_while_unverified_returns_200(client) -> None:
    payload = {"username": "dave", "email": "dave@example.com", "password": PASSWORD}
    first = await client.post("/api/auth/register", json=payload)
    second = await client.post("/api/auth/register", json=payload)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["userId"] == first.json()["userId"]


@pytest.mark.asyncio
async def test_register_verified_duplicate_is_400(client, make_user) -> None:
    await make_user(username="dave", email="dave@example.com")
    resp = await client.post(
        "/api/auth/register",
        json={"username": "dave", "email": "dave@example.com", "password": PASSWORD},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists and is verified"


@pytest.mark.asyncio
async def test_register_mail_failure_is_500_without_account(client, notifier, session_factory) -> None:
    notifier.fail = True
    resp = await client.post(
        "/api/auth/register",
        json={"username": "dave", "email": "dave@example.com", "password": PASSWORD},
    )
    assert resp.status_code == 500
    assert "smtp" not in resp.json()["detail"].lower()

    async with session_factory() as session:
        assert (await session.execute(select(User))).scalars().first() is None


@pytest.mark.asyncio
async def test_register_missing_fields(client) -> None:
    resp = await client.post("/api/auth/register", json={"username": "dave", "email": "dave@example.com"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "password is required"


@pytest.mark.asyncio
async def test_verify_otp_errors(client, make_user) -> None:
    resp = await client.post("/api/auth/verify-otp", json={"userId": "missing", "otp": "123456"})
    assert resp.status_code == 404

    user = await make_user(verified=False)
    resp = await client.post("/api/auth/verify-otp", json={"userId": user.id, "otp": "123456"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_resend_otp(client, notifier, make_user) -> None:
    user = await make_user(verified=False)

    resp = await client.post("/api/auth/resend-otp", json={"userId": user.id})
    assert resp.status_code == 200
    assert resp.json()["message"] == "New OTP sent successfully"
    assert len(notifier.sent) == 1

    resp = await client.post("/api/auth/resend-otp", json={"userId": "missing"})
    assert resp.status_code == 404

    notifier.fail = True
    resp = await client.post("/api/auth/resend-otp", json={"userId": user.id})
    assert resp.status_code == 500


@pytest.mark.asyncio
async def test_login(client, make_user) -> None:
    user = await make_user(email="erin@example.com")

    resp = await client.post("/api/auth/login", json={"email": "erin@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == user.id
    assert resp.json()["token"]

    resp = await client.post("/api/auth/login", json={"email": "erin@example.com", "password": "wrong"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_user_requires_valid_token(client, make_user) -> None:
    assert (await client.get("/api/auth/user")).status_code == 401
    resp = await client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401

    user = await make_user()
    resp = await client.get("/api/auth/user", headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["credits"] == 10
