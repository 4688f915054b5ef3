"""
FastAPI dependency injection for database sessions and services.

Backend clients are created once in the application lifespan and stored on
``app.state``; these dependencies hand them to the routes.
"""
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.search.query_expansion import QueryExpander
from src.services.auth_service import SessionGate
from src.services.search_service import SearchBackends
from src.services.usage_log import UsageLogger


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database session.

    Usage:
        @app.get("/items")
        async def read_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_backends(request: Request) -> SearchBackends:
    """FastAPI dependency for the embedding model and search backends."""
    return request.app.state.backends


def get_session_gate(request: Request) -> SessionGate:
    """FastAPI dependency for caller authentication."""
    return request.app.state.session_gate


def get_query_expander(request: Request) -> QueryExpander:
    """FastAPI dependency for query expansion."""
    return request.app.state.query_expander


def get_usage_logger(request: Request) -> UsageLogger:
    """FastAPI dependency for usage logging."""
    return request.app.state.usage_logger
