"""Pytest configuration and fixtures for dealroom.

Environment is set before dealroom is imported: a throwaway SQLite file for
metadata, a temp directory for local storage, and Redis, rate limiting and
telemetry switched off.
"""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="dealroom-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP}/test.db"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_ROOT"] = os.path.join(_TMP, "storage")
os.environ["STORAGE_BASE_URL"] = "http://test/api/v1"
os.environ["REDIS_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["REFETCH_DELAY_MS"] = "0"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from dealroom.application.notifications import CollectingNotifier  # noqa: E402
from dealroom.application.use_cases.documents import DocumentStore  # noqa: E402
from dealroom.core.config import Settings  # noqa: E402
from dealroom.infrastructure.persistence import database  # noqa: E402
from dealroom.infrastructure.persistence.models import Document  # noqa: E402
from dealroom.main import app  # noqa: E402
from tests.fakes import InMemoryDocumentRepository, InMemoryStorage  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings with no refetch delay and small upload ceilings."""
    return Settings(
        refetch_delay_ms=0,
        upload_concurrency=3,
        max_upload_size_documents_panel=1024,
        max_upload_size_document_center=2048,
        max_upload_size_category_section=4096,
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def repository() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
async def store(repository: InMemoryDocumentRepository) -> DocumentStore:
    """Store scoped to deal123, closed after the test."""
    s = DocumentStore(repository, "deal123")
    yield s
    await s.close()


@pytest.fixture
async def db_engine():
    """Fresh tables on the test SQLite file; engine disposed after the test.

    The engine is bound to the test's event loop, so it is created and
    disposed per test.
    """
    await database.create_all()
    yield database.get_engine()
    async with database.get_session_factory()() as session:
        async with session.begin():
            await session.execute(delete(Document))
    await database.dispose_engine()


@pytest.fixture
async def db_session(db_engine) -> AsyncSession:
    """Database session for repository tests. Rolls back after the test."""
    async with database.get_session_factory()() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(db_engine) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
