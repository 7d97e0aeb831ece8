"""
Auth service: signup, signin, password reset and session resolution.

Unlike the other services, this one is a class. Its configuration, the mail
transport and the clock are constructor arguments, so tests can build an
instance with a fixed clock and a recording mailer.

Session cookies are the router's business: operations that sign a user in
return an ``AuthResult`` carrying the token, and the router writes it.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import AuthError, NotFoundError, ValidationError
from storefront.models import User
from storefront.permissions import Permission
from storefront.repositories import UserRepository
from storefront.security import (
    create_session_token,
    decode_session_token,
    generate_reset_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class ResetMailer(Protocol):
    async def send_password_reset(self, to: str, reset_url: str) -> None: ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AuthResult:
    user: User
    token: str


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        *,
        secret: str,
        frontend_url: str,
        mailer: ResetMailer,
        reset_token_ttl: int = 3600,
        bcrypt_rounds: int = 10,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.users = UserRepository(db)
        self.secret = secret
        self.frontend_url = frontend_url.rstrip("/")
        self.mailer = mailer
        self.reset_token_ttl = timedelta(seconds=reset_token_ttl)
        self.bcrypt_rounds = bcrypt_rounds
        self.clock = clock

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(user=user, token=create_session_token(user.id, self.secret))

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def user_for_token(self, token: str | None) -> User | None:
        """Resolve a session token to its user; None for missing or bad tokens."""
        if not token:
            return None
        user_id = decode_session_token(token, self.secret)
        if user_id is None:
            return None
        return await self.users.get(user_id)

    async def signup(self, email: str, password: str, name: str) -> AuthResult:
        """
        Create a user with the default ``USER`` permission and sign them in.

        Email uniqueness is left to the database constraint; a collision
        surfaces as ``ValidationError``.
        """
        email = email.lower()
        try:
            user = await self.users.create(
                email=email,
                name=name,
                password=hash_password(password, self.bcrypt_rounds),
                permissions=Permission.USER,
            )
        except IntegrityError as exc:
            raise ValidationError(f"A user with email {email} already exists") from exc
        logger.info("New user signed up: id=%s", user.id)
        return self._issue(user)

    async def signin(self, email: str, password: str) -> AuthResult:
        email = email.lower()
        user = await self.users.find_by_email(email)
        if user is None:
            raise NotFoundError(f"No such user found for email {email}")
        if not verify_password(password, user.password):
            logger.warning("Failed signin for user id=%s", user.id)
            raise AuthError("Invalid Password!")
        return self._issue(user)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def reset_url(self, token: str) -> str:
        return f"{self.frontend_url}/reset?resetToken={token}"

    async def request_reset(self, email: str) -> None:
        """Store a fresh reset token on the user and mail them a reset link."""
        email = email.lower()
        user = await self.users.find_by_email(email)
        if user is None:
            raise NotFoundError(f"No such user found for email {email}")

        token = generate_reset_token()
        await self.users.update(
            user,
            reset_token=token,
            reset_token_expiry=self.clock() + self.reset_token_ttl,
        )
        await self.mailer.send_password_reset(user.email, self.reset_url(token))
        logger.info("Password reset requested for user id=%s", user.id)

    async def reset_password(self, token: str, password: str, confirm_password: str) -> AuthResult:
        """
        Replace the password of the user holding *token*.

        The token must still be inside its window; on success it is cleared
        together with its expiry, so it cannot be used twice.
        """
        if password != confirm_password:
            raise ValidationError("Passwords don't match!")

        user = await self.users.find_by_reset_token(token, valid_at=self.clock())
        if user is None:
            raise AuthError("This token is either invalid or expired!")

        await self.users.update(
            user,
            password=hash_password(password, self.bcrypt_rounds),
            reset_token=None,
            reset_token_expiry=None,
        )
        logger.info("Password reset completed for user id=%s", user.id)
        return self._issue(user)
