"""
Elasticsearch client for keyword search and chunk lookup by id.
"""
import logging
from typing import Any, Optional, Sequence

from elasticsearch import ApiError, AsyncElasticsearch, TransportError

from src.search.exceptions import BackendUnavailableError, ExpansionFetchError

logger = logging.getLogger(__name__)


class ElasticsearchClient:
    """
    Async Elasticsearch client wrapper for chunk retrieval.

    Provides:
    - Keyword query construction (should-match over query variants)
    - Search returning (chunk id, _source) pairs
    - Multi-get of chunks by id
    - Health checks
    """

    def __init__(self, url: str, api_key: Optional[str] = None) -> None:
        """
        Initialize Elasticsearch client.

        Args:
            url: Elasticsearch URL
            api_key: Optional API key
        """
        self.url = url
        self.api_key = api_key

        if self.api_key:
            self.client = AsyncElasticsearch(
                self.url,
                api_key=self.api_key,
            )
        else:
            self.client = AsyncElasticsearch(self.url)

        logger.info(f"Elasticsearch client initialized for {self.url}")

    async def check_connection(self) -> bool:
        """
        Check if Elasticsearch is reachable.

        Returns:
            bool: True if connected, False otherwise
        """
        try:
            info = await self.client.info()
            logger.info(f"Elasticsearch cluster: {info.get('cluster_name', 'unknown')}")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to Elasticsearch: {e}")
            return False

    @staticmethod
    def build_keyword_query(
        queries: Sequence[str],
        size: int,
        filter_clauses: Optional[list[dict[str, Any]]] = None,
        text_field: str = "text",
    ) -> dict[str, Any]:
        """
        Build a query matching any of several keyword strings.

        Args:
            queries: Keyword query variants (any one must match)
            size: Number of results to return
            filter_clauses: ``bool.filter`` clauses; the filter key is left
                out entirely when there are none
            text_field: Field holding the chunk text

        Returns:
            dict: Elasticsearch query DSL
        """
        bool_query: dict[str, Any] = {
            "should": [{"match": {text_field: query}} for query in queries],
            "minimum_should_match": 1,
        }
        if filter_clauses:
            bool_query["filter"] = filter_clauses

        return {"query": {"bool": bool_query}, "size": size}

    async def search(
        self,
        index_name: str,
        body: dict[str, Any],
    ) -> list[tuple[str, dict[str, Any]]]:
        """
        Run a search and return the hits in score order.

        Args:
            index_name: Index to search
            body: Query DSL with ``query`` and ``size``

        Returns:
            list: (chunk id, _source) pairs

        Raises:
            BackendUnavailableError: If the search call fails
        """
        try:
            response = await self.client.search(
                index=index_name,
                query=body["query"],
                size=body.get("size", 10),
            )
        except (ApiError, TransportError) as e:
            logger.error(f"Error searching '{index_name}': {e}")
            raise BackendUnavailableError("keyword", str(e)) from e

        return [(hit["_id"], hit.get("_source", {})) for hit in response["hits"]["hits"]]

    async def multi_get(
        self,
        index_name: str,
        ids: Sequence[str],
    ) -> list[tuple[str, dict[str, Any]]]:
        """
        Fetch chunks by id, skipping ids that do not exist.

        Args:
            index_name: Index holding the chunks
            ids: Chunk ids to fetch

        Returns:
            list: (chunk id, _source) pairs for the documents that were found

        Raises:
            ExpansionFetchError: If the multi-get call fails
        """
        if not ids:
            return []

        try:
            response = await self.client.mget(index=index_name, ids=list(ids))
        except (ApiError, TransportError) as e:
            logger.error(f"Error fetching {len(ids)} chunks from '{index_name}': {e}")
            raise ExpansionFetchError(f"multi-get on '{index_name}' failed: {e}") from e

        found = [
            (doc["_id"], doc.get("_source", {}))
            for doc in response["docs"]
            if doc.get("found")
        ]
        logger.debug(f"Multi-get: {len(ids)} requested, {len(found)} found")
        return found

    async def close(self) -> None:
        """Close the Elasticsearch client connection."""
        try:
            await self.client.close()
            logger.info("Elasticsearch client closed")
        except Exception as e:
            logger.error(f"Error closing Elasticsearch client: {e}")
