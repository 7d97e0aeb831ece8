"""
Password hashing, session tokens and the session cookie.

Passwords: bcrypt used directly (no passlib wrapper), salted with a
configurable cost factor. ``verify_password`` never raises; a malformed hash
simply fails verification.

Session tokens: python-jose HS256 JWTs carrying a ``user_id`` claim. The
signing secret is always passed in explicitly; nothing here reads global
configuration. ``decode_session_token`` returns None on any failure so the
dependency layer can treat a bad token exactly like a missing one.

Reset tokens: 20 random bytes (160 bits) from ``secrets``, hex-encoded.
"""
from __future__ import annotations

import secrets

import bcrypt
from jose import JWTError, jwt
from starlette.responses import Response

ALGORITHM = "HS256"
RESET_TOKEN_BYTES = 20


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(plain: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

def create_session_token(user_id: int, secret: str) -> str:
    return jwt.encode({"user_id": user_id}, secret, algorithm=ALGORITHM)


def decode_session_token(token: str, secret: str) -> int | None:
    """Return the user id embedded in *token*, or None if it does not verify."""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        return None
    return user_id


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------

def set_session_cookie(response: Response, token: str, name: str, max_age: int) -> None:
    """Attach the session token as an HTTP-only cookie on *response*."""
    response.set_cookie(
        name,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=max_age,
    )


def clear_session_cookie(response: Response, name: str) -> None:
    response.delete_cookie(name, httponly=True, samesite="lax")
