from __future__ import annotations

import os

# Settings are read when the app module is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ["RESEND_API_KEY"] = ""
os.environ["NOTIFY_FROM_EMAIL"] = ""

from collections.abc import AsyncIterator  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402
from src.api.deps import (  # noqa: E402
    get_db_session,
    get_notification_queue,
    get_retry_policy,
)
from src.api.main import app  # noqa: E402
from src.core.security import create_access_token  # noqa: E402
from src.domain.services.submission import RetryPolicy  # noqa: E402
from src.infrastructure.db.base import Base  # noqa: E402

from tests.utils import RecordingQueue  # noqa: E402


@pytest.fixture()
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def notification_queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    notification_queue: RecordingQueue,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the in-memory database."""

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_notification_queue] = lambda: notification_queue
    app.dependency_overrides[get_retry_policy] = lambda: RetryPolicy(
        max_attempts=2, initial_delay=0, max_delay=0
    )

    transport = ASGITransport(app=app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture()
def admin_token() -> str:
    """Generate admin JWT token for testing."""
    return create_access_token(str(uuid4()), roles=["admin"], email="admin@example.com")


@pytest.fixture()
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}
