"""
Test infrastructure for the Storefront API.

Strategy
--------
- SQLite in-memory via aiosqlite, shared through StaticPool so every
  session sees the same database; tables are created fresh before each test
  and dropped after.
- The app's get_db dependency is overridden so every request uses the test
  session factory.
- Redis is disabled (cache._redis = None); CacheManager treats that as a
  permanent miss, so the real database path is always exercised.
- The SMTP mailer is replaced by ``RecordingMailer``, which keeps every
  reset link it was asked to send.
- BCRYPT_ROUNDS is lowered before any storefront import so the suite does
  not spend most of its time hashing. The production cost factor is covered
  separately in test_security.py.
- Session cookies are passed explicitly per request (``cookie_for``) and
  the client cookie jar is cleared after every sign-in, so tests can act as
  several users from one client.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from storefront.cache import cache
from storefront.config import settings
from storefront.database import Base, get_db
from storefront.dependencies import get_mailer
from storefront.main import app
from storefront.middleware import install_query_counter
from storefront.models import User
from storefront.permissions import Permission
from storefront.security import create_session_token, hash_password

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class RecordingMailer:
    """Stands in for ``Mailer``; records (recipient, reset_url) pairs."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_password_reset(self, to: str, reset_url: str) -> None:
        self.sent.append((to, reset_url))

    @property
    def last_token(self) -> str:
        return self.sent[-1][1].split("resetToken=", 1)[1]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def cookie_for(token: str) -> dict:
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}


async def signup(
    client: AsyncClient,
    email: str = "wes@example.com",
    password: str = "dogs123",
    name: str = "Wes",
) -> tuple[dict, str]:
    """Sign a new user up over HTTP and return (user json, session token)."""
    resp = await client.post("/api/v1/auth/signup", json={
        "email": email, "password": password, "name": name,
    })
    assert resp.status_code == 201, resp.text
    token = resp.cookies[settings.SESSION_COOKIE_NAME]
    client.cookies.clear()
    return resp.json(), token


async def create_user(
    db: AsyncSession,
    email: str = "admin@example.com",
    permissions: Permission = Permission.USER | Permission.ADMIN,
    password: str = "secret",
) -> tuple[User, str]:
    """Insert a user directly and return it with a valid session token."""
    user = User(
        email=email,
        name=email.split("@")[0],
        password=hash_password(password, rounds=4),
        permissions=permissions,
    )
    db.add(user)
    await db.commit()
    return user, create_session_token(user.id, settings.APP_SECRET)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    async with async_session_test() as session:
        yield session


@pytest.fixture
def mailer() -> RecordingMailer:
    recording = RecordingMailer()
    app.dependency_overrides[get_mailer] = lambda: recording
    yield recording
    app.dependency_overrides.pop(get_mailer, None)


@pytest_asyncio.fixture
async def async_client(mailer: RecordingMailer) -> AsyncClient:
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
