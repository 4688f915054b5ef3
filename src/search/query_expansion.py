"""
Query expansion: one raw question in, one semantic query plus multilingual
keyword queries out.
"""

import asyncio
import logging

from anthropic import APIError
from pydantic import BaseModel, Field

from src.models.llm import ClaudeClient
from src.models.prompts import QUERY_EXPANSION_SYSTEM_PROMPT, format_query_expansion_prompt
from src.search.exceptions import QueryExpansionError

logger = logging.getLogger(__name__)

# Order in which keyword lists are flattened
KEYWORD_LANGUAGES = ("zh-Hant", "zh-Hans", "en")


class ExpandedQuery(BaseModel):
    """Result of expanding a raw user question."""

    semantic_query: str = Field(..., min_length=1)
    keyword_queries_by_language: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def keyword_queries(self) -> list[str]:
        """All keyword queries as one list, known languages first."""
        queries: list[str] = []
        for language in KEYWORD_LANGUAGES:
            queries.extend(self.keyword_queries_by_language.get(language, []))
        for language, phrases in self.keyword_queries_by_language.items():
            if language not in KEYWORD_LANGUAGES:
                queries.extend(phrases)
        return queries


class _ExpansionAnswer(BaseModel):
    semantic_query: str = Field(..., min_length=1)
    fulltext_queries: dict[str, list[str]] = Field(default_factory=dict)


class QueryExpander:
    """
    Expands raw questions with Claude.
    """

    def __init__(self, llm_client: ClaudeClient) -> None:
        self.llm_client = llm_client

    async def expand(self, raw_query: str) -> ExpandedQuery:
        """
        Expand a raw question into retrieval queries.

        Args:
            raw_query: Question as typed by the user

        Returns:
            ExpandedQuery

        Raises:
            QueryExpansionError: If the model call fails or its answer is not usable
        """
        try:
            answer = await asyncio.to_thread(
                self.llm_client.complete_json,
                format_query_expansion_prompt(raw_query),
                QUERY_EXPANSION_SYSTEM_PROMPT,
                _ExpansionAnswer,
            )
        except (ValueError, APIError) as e:
            raise QueryExpansionError(f"Query expansion failed: {e}") from e

        expanded = ExpandedQuery(
            semantic_query=answer["semantic_query"],
            keyword_queries_by_language=answer["fulltext_queries"],
        )
        logger.info(
            f"Expanded query '{raw_query}' -> semantic='{expanded.semantic_query}', "
            f"{len(expanded.keyword_queries)} keyword queries"
        )
        return expanded
