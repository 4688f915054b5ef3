"""
ChromaDB vector store client for semantic search over chunk embeddings.
"""
import logging
from typing import Any, Optional

import chromadb
from chromadb.config import Settings as ChromaSettings

from src.config import Settings
from src.search.exceptions import BackendUnavailableError

logger = logging.getLogger(__name__)


def create_chroma_client(settings: Settings) -> Any:
    """
    Create the ChromaDB client described by ``settings``.

    Uses the HTTP client when ``chroma_http_client`` is set (Docker/production),
    otherwise a persistent client for local development.
    """
    if settings.chroma_http_client:
        logger.info(f"Using ChromaDB HTTP client: {settings.chroma_host}:{settings.chroma_port}")
        return chromadb.HttpClient(
            host=settings.chroma_host,
            port=settings.chroma_port,
            settings=ChromaSettings(anonymized_telemetry=False),
        )

    logger.info(f"Using ChromaDB persistent client: {settings.chroma_persist_dir}")
    return chromadb.PersistentClient(
        path=settings.chroma_persist_dir,
        settings=ChromaSettings(anonymized_telemetry=False),
    )


class VectorStore:
    """
    ChromaDB client for nearest-neighbour search over chunk embeddings.
    """

    def __init__(self, client: Any) -> None:
        """
        Initialize the vector store.

        Args:
            client: ChromaDB client (HTTP or persistent)
        """
        self.client = client

    def query(
        self,
        collection_name: str,
        vector: list[float],
        top_k: int,
        where: Optional[dict[str, Any]] = None,
    ) -> list[tuple[str, dict[str, Any], Optional[str]]]:
        """
        Find the chunks closest to ``vector``.

        Metadata and documents are returned, embeddings are not.

        Args:
            collection_name: Collection to search
            vector: Query embedding
            top_k: Number of neighbours to return
            where: Metadata filter; omitted from the query when None

        Returns:
            list: (chunk id, metadata, document) triples in similarity order

        Raises:
            BackendUnavailableError: If the query fails
        """
        query_kwargs: dict[str, Any] = {
            "query_embeddings": [vector],
            "n_results": top_k,
            "include": ["metadatas", "documents"],
        }
        if where is not None:
            query_kwargs["where"] = where

        try:
            collection = self.client.get_collection(name=collection_name)
            result = collection.query(**query_kwargs)
        except Exception as e:
            logger.error(f"ChromaDB query on '{collection_name}' failed: {e}")
            raise BackendUnavailableError("vector", str(e)) from e

        ids = result["ids"][0] if result.get("ids") else []
        metadatas = result["metadatas"][0] if result.get("metadatas") else [None] * len(ids)
        documents = result["documents"][0] if result.get("documents") else [None] * len(ids)

        return [
            (chunk_id, metadata or {}, document)
            for chunk_id, metadata, document in zip(ids, metadatas, documents)
        ]

    def check_connection(self) -> bool:
        """
        Check if ChromaDB connection is working.
        Returns True if connection is successful, False otherwise.
        """
        try:
            self.client.heartbeat()
            return True
        except Exception as e:
            logger.error(f"ChromaDB connection check failed: {e}")
            return False
