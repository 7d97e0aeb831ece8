"""
Auth endpoint tests: signup, signin, signout and the password-reset flow
over HTTP, including the session cookie they set.
"""
import pytest
from httpx import AsyncClient

from storefront.config import settings
from tests.conftest import RecordingMailer, cookie_for, signup


# ---------------------------------------------------------------------------
# Signup
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_signup_returns_user_with_default_permissions(async_client: AsyncClient):
    user, _ = await signup(async_client, email="new@example.com", name="New")
    assert user["email"] == "new@example.com"
    assert user["name"] == "New"
    assert user["permissions"] == ["USER"]
    assert "password" not in user


@pytest.mark.asyncio
async def test_signup_lowercases_email(async_client: AsyncClient):
    user, _ = await signup(async_client, email="MiXeD@Example.COM")
    assert user["email"] == "mixed@example.com"


@pytest.mark.asyncio
async def test_signup_sets_http_only_year_long_cookie(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "cookie@example.com", "password": "pw", "name": "Cookie",
    })
    assert resp.status_code == 201
    set_cookie = resp.headers["set-cookie"].lower()
    assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "httponly" in set_cookie
    assert f"max-age={60 * 60 * 24 * 365}" in set_cookie


@pytest.mark.asyncio
async def test_signup_duplicate_email_is_rejected(async_client: AsyncClient):
    await signup(async_client, email="dup@example.com")
    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "DUP@example.com", "password": "pw", "name": "Again",
    })
    assert resp.status_code == 400
    assert "already exists" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_signup_missing_name_is_422(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "noname@example.com", "password": "pw",
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_signup_password_over_72_utf8_bytes_is_422(async_client: AsyncClient):
    # 40 characters, 80 bytes: inside the character cap, over bcrypt's byte limit.
    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "accent@example.com", "password": "é" * 40, "name": "Accent",
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_signup_password_of_72_utf8_bytes_is_accepted(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "accent@example.com", "password": "é" * 36, "name": "Accent",
    })
    assert resp.status_code == 201


# ---------------------------------------------------------------------------
# Signin
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_signup_then_signin_sets_equivalent_cookie(async_client: AsyncClient):
    user, signup_token = await signup(async_client, email="round@example.com", password="pw1")

    resp = await async_client.post("/api/v1/auth/signin", json={
        "email": "round@example.com", "password": "pw1",
    })
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]
    assert resp.cookies[settings.SESSION_COOKIE_NAME] == signup_token


@pytest.mark.asyncio
async def test_signin_is_case_insensitive_on_email(async_client: AsyncClient):
    await signup(async_client, email="case@example.com", password="pw")
    resp = await async_client.post("/api/v1/auth/signin", json={
        "email": "Case@Example.com", "password": "pw",
    })
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_signin_wrong_password_is_401(async_client: AsyncClient):
    await signup(async_client, email="wrongpw@example.com", password="right")
    resp = await async_client.post("/api/v1/auth/signin", json={
        "email": "wrongpw@example.com", "password": "wrong",
    })
    assert resp.status_code == 401
    assert "set-cookie" not in resp.headers


@pytest.mark.asyncio
async def test_signin_unknown_email_is_404(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signin", json={
        "email": "ghost@example.com", "password": "pw",
    })
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Signout
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_signout_clears_cookie(async_client: AsyncClient):
    _, token = await signup(async_client)
    resp = await async_client.post("/api/v1/auth/signout", headers=cookie_for(token))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Goodbye!"}
    set_cookie = resp.headers["set-cookie"].lower()
    assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "max-age=0" in set_cookie


@pytest.mark.asyncio
async def test_signout_without_session_still_succeeds(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signout")
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_request_reset_mails_link(async_client: AsyncClient, mailer: RecordingMailer):
    await signup(async_client, email="forgot@example.com")
    resp = await async_client.post("/api/v1/auth/request-reset", json={"email": "forgot@example.com"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Thanks!"}

    assert len(mailer.sent) == 1
    to, url = mailer.sent[0]
    assert to == "forgot@example.com"
    assert url.startswith(f"{settings.FRONTEND_URL.rstrip('/')}/reset?resetToken=")
    assert len(mailer.last_token) == 40


@pytest.mark.asyncio
async def test_request_reset_unknown_email_is_404(async_client: AsyncClient, mailer: RecordingMailer):
    resp = await async_client.post("/api/v1/auth/request-reset", json={"email": "nobody@example.com"})
    assert resp.status_code == 404
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_reset_password_flow(async_client: AsyncClient, mailer: RecordingMailer):
    user, _ = await signup(async_client, email="reset@example.com", password="old")
    await async_client.post("/api/v1/auth/request-reset", json={"email": "reset@example.com"})

    resp = await async_client.post("/api/v1/auth/reset-password", json={
        "resetToken": mailer.last_token,
        "password": "new",
        "confirmPassword": "new",
    })
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]
    assert settings.SESSION_COOKIE_NAME in resp.cookies
    async_client.cookies.clear()

    old = await async_client.post("/api/v1/auth/signin", json={
        "email": "reset@example.com", "password": "old",
    })
    assert old.status_code == 401
    async_client.cookies.clear()
    new = await async_client.post("/api/v1/auth/signin", json={
        "email": "reset@example.com", "password": "new",
    })
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_reset_token_is_single_use(async_client: AsyncClient, mailer: RecordingMailer):
    await signup(async_client, email="once@example.com")
    await async_client.post("/api/v1/auth/request-reset", json={"email": "once@example.com"})
    payload = {"resetToken": mailer.last_token, "password": "a", "confirmPassword": "a"}

    first = await async_client.post("/api/v1/auth/reset-password", json=payload)
    assert first.status_code == 200
    async_client.cookies.clear()

    second = await async_client.post("/api/v1/auth/reset-password", json=payload)
    assert second.status_code == 401


@pytest.mark.asyncio
async def test_reset_password_mismatch_is_400(async_client: AsyncClient, mailer: RecordingMailer):
    await signup(async_client, email="mismatch@example.com")
    await async_client.post("/api/v1/auth/request-reset", json={"email": "mismatch@example.com"})
    resp = await async_client.post("/api/v1/auth/reset-password", json={
        "resetToken": mailer.last_token,
        "password": "one",
        "confirmPassword": "two",
    })
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Passwords don't match!"


@pytest.mark.asyncio
async def test_reset_password_over_72_utf8_bytes_is_422(
    async_client: AsyncClient, mailer: RecordingMailer
):
    await signup(async_client, email="longpw@example.com")
    await async_client.post("/api/v1/auth/request-reset", json={"email": "longpw@example.com"})
    resp = await async_client.post("/api/v1/auth/reset-password", json={
        "resetToken": mailer.last_token,
        "password": "é" * 40,
        "confirmPassword": "é" * 40,
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_reset_password_bogus_token_is_401(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/reset-password", json={
        "resetToken": "0" * 40,
        "password": "x",
        "confirmPassword": "x",
    })
    assert resp.status_code == 401
