"""
Pytest configuration and shared fixtures for tests.
"""
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.db.elasticsearch import ElasticsearchClient
from src.db.models import Journal
from src.db.postgres import Base
from src.main import create_app
from src.search.documents import Hit, HitOrigin
from src.search.identifiers import sort_index_of
from src.services.search_service import SearchBackends


@pytest.fixture
def app():
    """Create a FastAPI app instance for testing."""
    return create_app()


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app (lifespan not started)."""
    return TestClient(app)


@pytest.fixture
async def async_db_engine():
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def async_session_factory(async_db_engine):
    """Session factory bound to the in-memory engine."""
    return async_sessionmaker(
        async_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def async_db_session(async_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create an async database session for testing."""
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def sample_journals(async_db_session: AsyncSession) -> list[Journal]:
    """Journal records for citing sci passages."""
    journals = [
        Journal(
            doi="10.1111/jiec.13000",
            title="Global trade of critical metals",
            authors=["Alice Chen", "Bob Wang"],
        ),
        Journal(
            doi="10.1016/j.resconrec.2023.107000",
            title="Material flows of lithium",
            authors=["Carol Liu"],
        ),
    ]
    for journal in journals:
        async_db_session.add(journal)
    await async_db_session.commit()
    return journals


@pytest.fixture
def make_hit():
    """Factory building Hits with the chunk index parsed from the chunk id."""

    def _make_hit(chunk_id: str, parent_id: str, text: str = "", **fields) -> Hit:
        return Hit(
            chunk_id=chunk_id,
            parent_id=parent_id,
            sort_index=sort_index_of(chunk_id),
            text=text or f"text of {chunk_id}",
            origin=fields.pop("origin", HitOrigin.SIMILARITY),
            **fields,
        )

    return _make_hit


@pytest.fixture
def mock_embedder():
    """Query embedder returning a fixed vector."""
    embedder = MagicMock()
    embedder.embed_query.return_value = [0.1, 0.2, 0.3]
    return embedder


@pytest.fixture
def mock_vector_store():
    """Vector store with no matches."""
    store = MagicMock()
    store.query.return_value = []
    store.check_connection.return_value = True
    return store


@pytest.fixture
def mock_keyword_store():
    """Keyword store with no matches; builds real query bodies."""
    store = MagicMock()
    store.build_keyword_query.side_effect = ElasticsearchClient.build_keyword_query
    store.search = AsyncMock(return_value=[])
    store.multi_get = AsyncMock(return_value=[])
    return store


@pytest.fixture
def mock_backends(mock_embedder, mock_vector_store, mock_keyword_store) -> SearchBackends:
    """Backend bundle built from mocks."""
    return SearchBackends(
        embedder=mock_embedder,
        vector_store=mock_vector_store,
        keyword_store=mock_keyword_store,
    )
