from functools import lru_cache

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.database import get_db
from storefront.mail import Mailer
from storefront.models import User
from storefront.services.auth_service import AuthService


class PaginationParams:
    """
    Reusable FastAPI dependency that parses item pagination and ordering
    query parameters.

    Attributes
    ----------
    skip:
        Number of items to skip from the start of the ordering.
    first:
        Page size, clamped to ``settings.MAX_PAGE_SIZE`` regardless of the
        value supplied by the caller.
    order_by:
        Column to order by. The repository falls back to ``created_at`` for
        anything it does not recognise.
    order:
        ``"asc"`` or ``"desc"`` (enforced by the regex pattern).
    """

    def __init__(
        self,
        skip: int = Query(0, ge=0, description="Items to skip."),
        first: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=100,
            description="Number of items to return (max 100).",
        ),
        order_by: str = Query("created_at", description="Column to order by."),
        order: str = Query("desc", pattern="^(asc|desc)$", description="'asc' or 'desc'."),
    ) -> None:
        self.skip = skip
        self.first = min(first, settings.MAX_PAGE_SIZE)
        self.order_by = order_by
        self.order = order


@lru_cache
def get_mailer() -> Mailer:
    return Mailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        sender=settings.MAIL_FROM,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
    )


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    return AuthService(
        db,
        secret=settings.APP_SECRET,
        frontend_url=settings.FRONTEND_URL,
        mailer=mailer,
        reset_token_ttl=settings.RESET_TOKEN_TTL,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )


async def get_current_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User | None:
    """
    Resolve the ``token`` session cookie to a User.

    Returns None when the cookie is missing, does not verify, or names a
    user that no longer exists. Services decide whether a session is
    required and raise ``AuthError`` themselves.
    """
    return await auth.user_for_token(request.cookies.get(settings.SESSION_COOKIE_NAME))
