from dataclasses import dataclass
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, List, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

# Use in-memory SQLite for testing
# Note: We use check_same_thread=False for SQLite with async
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "admin@fauxdash.net"
ADMIN_PASSWORD = "Adm1n-Passw0rd"
USER_EMAIL = "viewer@fauxdash.net"
USER_PASSWORD = "V1ewer-Passw0rd"


@dataclass
class SentEmail:
    to: str
    subject: str
    text: str
    html_body: Optional[str]


class RecordingSender:
    """Stands in for EmailSender and keeps every message in an outbox list."""

    def __init__(self, outbox: List[SentEmail], config) -> None:
        self.outbox = outbox
        self.config = config

    async def send(self, to: str, subject: str, text: str, html_body: Optional[str] = None):
        from fauxdash.server.services.mailer import EmailResult

        self.outbox.append(SentEmail(to=to, subject=subject, text=text, html_body=html_body))
        return EmailResult(success=True)


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    import fauxdash.core.database.entities  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def reset_process_state():
    """Drop module level caches and rate limit windows around every test."""
    from fauxdash.geoip import geoip_registry
    from fauxdash.server.security.rate_limit import rate_limiter
    from fauxdash.server.services.catalog_service import invalidate_catalog
    from fauxdash.server.services.settings_service import global_settings_cache

    rate_limiter.reset()
    invalidate_catalog()
    global_settings_cache.invalidate()
    await geoip_registry.reset()
    yield
    rate_limiter.reset()
    invalidate_catalog()
    global_settings_cache.invalidate()
    await geoip_registry.reset()


@pytest.fixture
def outbox() -> List[SentEmail]:
    return []


@pytest.fixture
def favicon_directory(tmp_path: Path) -> Path:
    directory = tmp_path / "favicons"
    directory.mkdir()
    return directory


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession,
    session_maker: async_sessionmaker,
    outbox: List[SentEmail],
    favicon_directory: Path,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from fauxdash.core.database import get_session, get_session_factory
    from fauxdash.server.api.v1.favicons import get_favicon_dir
    from fauxdash.server.main import app
    from fauxdash.server.services.mailer import get_email_sender

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    def get_email_sender_override():
        return lambda config: RecordingSender(outbox, config)

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_session_factory] = lambda: session_maker
    app.dependency_overrides[get_email_sender] = get_email_sender_override
    app.dependency_overrides[get_favicon_dir] = lambda: favicon_directory

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("fauxdash.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


async def _create_user(session: AsyncSession, email: str, password: Optional[str], is_admin: bool):
    from fauxdash.core.database.entities import User
    from fauxdash.core.database.repositories import UserRepository
    from fauxdash.server.security.passwords import hash_password

    return await UserRepository(session).create(
        User(
            email=email,
            username=email.split("@")[0],
            is_admin=is_admin,
            password_hash=hash_password(password) if password else None,
        )
    )


@pytest_asyncio.fixture
async def admin_user(session: AsyncSession):
    return await _create_user(session, ADMIN_EMAIL, ADMIN_PASSWORD, is_admin=True)


@pytest_asyncio.fixture
async def regular_user(session: AsyncSession):
    return await _create_user(session, USER_EMAIL, USER_PASSWORD, is_admin=False)


@pytest.fixture
def login(client: AsyncClient) -> Callable[..., Awaitable]:
    """Sign the shared client in and return the response."""

    async def _login(email: str, password: str, remember_days: int = 2):
        return await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password, "remember_days": remember_days},
        )

    return _login


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_user, login) -> AsyncClient:
    response = await login(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert response.status_code == 200, response.text
    return client


@pytest_asyncio.fixture
async def user_client(client: AsyncClient, regular_user, login) -> AsyncClient:
    response = await login(USER_EMAIL, USER_PASSWORD)
    assert response.status_code == 200, response.text
    return client
