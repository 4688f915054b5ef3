"""
Main FastAPI application for hybrid retrieval.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.config import get_settings
from src.db.elasticsearch import ElasticsearchClient
from src.db.postgres import check_db_connection, create_engine_from_url, create_session_factory
from src.db.session_cache import SessionCache
from src.db.vector_store import VectorStore, create_chroma_client
from src.models.embeddings import QueryEmbedder
from src.models.llm import ClaudeClient
from src.search.query_expansion import QueryExpander
from src.services.auth_service import PasswordAuthenticator, SessionGate
from src.services.search_service import SearchBackends
from src.services.usage_log import UsageLogger

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for startup and shutdown events.

    Builds every backend client once and stores it on ``app.state``.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting hybrid retrieval service in {settings.environment} mode")

    logger.info("Initializing database connections...")
    engine = create_engine_from_url(
        settings.postgres_url, echo=settings.environment == "development"
    )
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    logger.info("Loading embedding model and search backends...")
    keyword_store = ElasticsearchClient(settings.elasticsearch_url, settings.elasticsearch_api_key)
    app.state.backends = SearchBackends(
        embedder=QueryEmbedder(settings.embedding_model),
        vector_store=VectorStore(create_chroma_client(settings)),
        keyword_store=keyword_store,
    )

    session_cache = SessionCache.from_url(settings.redis_url, settings.session_ttl_seconds)
    http_client = httpx.AsyncClient(timeout=settings.auth_timeout_seconds)
    app.state.session_cache = session_cache
    app.state.session_gate = SessionGate(
        session_cache,
        PasswordAuthenticator(http_client, settings.auth_url, settings.auth_api_key),
    )
    app.state.query_expander = QueryExpander(ClaudeClient())
    app.state.usage_logger = UsageLogger(app.state.session_factory)

    yield

    logger.info("Shutting down hybrid retrieval service")
    await keyword_store.close()
    await http_client.aclose()
    await session_cache.close()
    await engine.dispose()


async def _probe(name: str, check: Callable[[], Awaitable[bool]]) -> dict[str, str]:
    try:
        connected = await check()
    except Exception as e:
        logger.warning(f"Health probe for {name} failed: {e}")
        return {"status": "error", "message": str(e)}
    return {"status": "connected" if connected else "disconnected"}


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title="Hybrid Retrieval Service",
        description="Merges vector similarity and keyword search results into cited passages",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "healthy", "environment": settings.environment}

    @app.get("/health/detailed")
    async def detailed_health_check(request: Request) -> dict[str, Any]:
        """
        Connectivity of every backend the search endpoints depend on.

        Status is "degraded" when any backend is unreachable.
        """
        state = request.app.state
        probes: dict[str, Callable[[], Awaitable[bool]]] = {
            "postgres": lambda: check_db_connection(state.engine),
            "redis": lambda: state.session_cache.check_connection(),
            "chromadb": lambda: asyncio.to_thread(state.backends.vector_store.check_connection),
            "elasticsearch": lambda: state.backends.keyword_store.check_connection(),
        }

        services = {name: await _probe(name, check) for name, check in probes.items()}
        degraded = any(service["status"] != "connected" for service in services.values())

        return {
            "status": "degraded" if degraded else "healthy",
            "environment": settings.environment,
            "services": services,
        }

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Hybrid Retrieval API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    from src.api.routes import search
    app.include_router(search.router, prefix="/api/v1/search", tags=["search"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
