"""
Search service implementing the hybrid retrieval pipeline.

This service coordinates the vector store, the keyword store and the
journals table to answer one search request:

1. Similarity and keyword queries run concurrently
2. Their hits are merged by chunk id (similarity wins)
3. Optionally, neighbouring chunks are fetched by id
4. Chunks are grouped into one passage per parent document
5. Every passage gets a citation
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.elasticsearch import ElasticsearchClient
from src.db.journals import DEFAULT_BATCH_SIZE, fetch_journal_records
from src.db.vector_store import VectorStore
from src.models.embeddings import QueryEmbedder
from src.models.schemas import SearchResultItem
from src.search.citations import format_journal_citation, format_textbook_citation
from src.search.corpora import CitationStyle, CorpusProfile
from src.search.documents import Hit, HitOrigin, Passage
from src.search.exceptions import BackendUnavailableError
from src.search.filters import SearchFilter
from src.search.hybrid_search import expansion_candidates, group_passages, union_hits

logger = logging.getLogger(__name__)


@dataclass
class SearchBackends:
    """Backend clients shared by all requests, built once at startup."""

    embedder: QueryEmbedder
    vector_store: VectorStore
    keyword_store: ElasticsearchClient


class SearchService:
    """
    Hybrid search over one corpus.

    Attributes:
        backends: Embedding model and search backends
        corpus: Corpus to search (collection, index, field layout, citation style)
        journal_batch_size: Maximum DOIs per journals query
    """

    def __init__(
        self,
        backends: SearchBackends,
        corpus: CorpusProfile,
        journal_batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.backends = backends
        self.corpus = corpus
        self.journal_batch_size = journal_batch_size

    async def search(
        self,
        semantic_query: str,
        keyword_queries: Sequence[str],
        top_k: int,
        ext_k: int = 0,
        search_filter: Optional[SearchFilter] = None,
        db: Optional[AsyncSession] = None,
    ) -> List[SearchResultItem]:
        """
        Run the full pipeline for one request.

        Args:
            semantic_query: Text embedded for the similarity search
            keyword_queries: Keyword variants for the full-text search
            top_k: Hits requested from each backend
            ext_k: Neighbouring chunks to add on each side of every hit
            search_filter: Metadata filter applied by both backends
            db: Database session, required for cross-reference citations

        Returns:
            List of {content, source} items, one per parent document

        Raises:
            BackendUnavailableError: If either search backend fails
            ExpansionFetchError: If fetching neighbouring chunks fails
            CitationRecordMissingError: If a journal record is missing
        """
        start_time = time.time()
        search_filter = search_filter or SearchFilter()

        logger.info(
            f"Executing {self.corpus.name}: semantic='{semantic_query}', "
            f"{len(keyword_queries)} keyword queries, top_k={top_k}, ext_k={ext_k}, "
            f"filter={search_filter.to_dict()}"
        )

        # Both branches always finish; the first failure is re-raised
        outcomes = await asyncio.gather(
            self._similarity_search(semantic_query, top_k, search_filter),
            self._keyword_search(keyword_queries, top_k, search_filter),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        similarity_hits, keyword_hits = outcomes

        hits = union_hits(similarity_hits, keyword_hits)

        if ext_k > 0:
            hits.extend(await self._expand(hits, ext_k))

        passages = group_passages(hits)
        passages = await self._cite(passages, db)

        query_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"{self.corpus.name} completed: {len(passages)} passages in {query_time_ms}ms"
        )

        return [SearchResultItem(content=p.text, source=p.source) for p in passages]

    async def _similarity_search(
        self,
        semantic_query: str,
        top_k: int,
        search_filter: SearchFilter,
    ) -> List[Hit]:
        """Embed the query and fetch its nearest chunks."""
        try:
            vector = await asyncio.to_thread(
                self.backends.embedder.embed_query, semantic_query
            )
        except Exception as e:
            logger.error(f"Embedding the semantic query failed: {e}")
            raise BackendUnavailableError("embedding", str(e)) from e

        matches = await asyncio.to_thread(
            self.backends.vector_store.query,
            self.corpus.collection,
            vector,
            top_k,
            search_filter.to_vector_where(),
        )

        fields = self.corpus.vector_fields
        return [
            fields.to_hit(chunk_id, metadata, HitOrigin.SIMILARITY, document=document)
            for chunk_id, metadata, document in matches
        ]

    async def _keyword_search(
        self,
        keyword_queries: Sequence[str],
        top_k: int,
        search_filter: SearchFilter,
    ) -> List[Hit]:
        """Match any of the keyword queries in the keyword store."""
        if not keyword_queries:
            logger.info("No keyword queries, skipping keyword search")
            return []

        keyword_store = self.backends.keyword_store
        fields = self.corpus.keyword_fields
        body = keyword_store.build_keyword_query(
            queries=keyword_queries,
            size=top_k,
            filter_clauses=search_filter.to_keyword_clauses(),
            text_field=fields.text,
        )
        documents = await keyword_store.search(self.corpus.index, body)

        return [
            fields.to_hit(chunk_id, source, HitOrigin.KEYWORD)
            for chunk_id, source in documents
        ]

    async def _expand(self, hits: Sequence[Hit], ext_k: int) -> List[Hit]:
        """Fetch the not-yet-retrieved neighbours of every hit."""
        candidates = expansion_candidates((hit.chunk_id for hit in hits), ext_k)
        if not candidates:
            return []

        documents = await self.backends.keyword_store.multi_get(
            self.corpus.index, sorted(candidates)
        )

        fields = self.corpus.keyword_fields
        expanded = [
            fields.to_hit(chunk_id, source, HitOrigin.EXPANSION)
            for chunk_id, source in documents
        ]
        logger.info(
            f"Context expansion: {len(candidates)} candidates -> {len(expanded)} chunks added"
        )
        return expanded

    async def _cite(
        self,
        passages: List[Passage],
        db: Optional[AsyncSession],
    ) -> List[Passage]:
        """Attach a citation string to every passage."""
        if self.corpus.citation_style == CitationStyle.SELF_CONTAINED:
            return [p.with_source(format_textbook_citation(p)) for p in passages]

        if not passages:
            return []
        if db is None:
            raise ValueError("A database session is required for cross-reference citations")

        dois = sorted({p.identifier_code or p.parent_id for p in passages})
        records = await fetch_journal_records(db, dois, batch_size=self.journal_batch_size)
        records_by_doi = {record.doi: record for record in records or []}

        return [p.with_source(format_journal_citation(p, records_by_doi)) for p in passages]
