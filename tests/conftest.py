"""Shared library test configuration."""

from datetime import UTC, datetime

import httpx
import pytest
from draftwire.database import init_models
from draftwire.models import Document, DocumentCategory
from draftwire.services.generation_client import GenerationClient, GenerationConfig
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


@pytest.fixture
async def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def add_document(session_factory):
    """Insert a document row and return its id."""

    async def _add(
        *,
        title="Original title",
        body="Original body text.",
        status="pending",
        categories=(),
        created_at=None,
        author_id=1,
    ) -> int:
        async with session_factory() as session:
            document = Document(
                title=title,
                body=body,
                status=status,
                author_id=author_id,
                created_at=created_at or datetime(2026, 1, 1, tzinfo=UTC),
                updated_at=created_at or datetime(2026, 1, 1, tzinfo=UTC),
            )
            document.categories = [DocumentCategory(category=c) for c in categories]
            session.add(document)
            await session.commit()
            return document.id

    return _add


@pytest.fixture
def make_client():
    """Build a GenerationClient whose HTTP calls go to ``handler``."""

    def _make(handler, **config_values) -> GenerationClient:
        config_values.setdefault("api_key", "sk-test")
        config = GenerationConfig.create(**config_values)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GenerationClient(config, http_client=http_client)

    return _make
