"""
Tests for query expansion.
"""

from unittest.mock import MagicMock

import httpx
import pytest
from anthropic import APIConnectionError

from src.models.prompts import QUERY_EXPANSION_SYSTEM_PROMPT
from src.search.exceptions import QueryExpansionError
from src.search.query_expansion import ExpandedQuery, QueryExpander


@pytest.fixture
def mock_llm():
    """LLM client returning a fixed expansion answer."""
    llm = MagicMock()
    llm.complete_json.return_value = {
        "semantic_query": "How exposed is cobalt supply to trade disruption?",
        "fulltext_queries": {
            "en": ["cobalt supply", "trade disruption"],
            "zh-Hans": ["钴供应"],
            "zh-Hant": ["鈷供應"],
        },
    }
    return llm


class TestExpandedQuery:
    """Test suite for ExpandedQuery."""

    def test_keyword_queries_in_language_order(self):
        expanded = ExpandedQuery(
            semantic_query="q",
            keyword_queries_by_language={
                "en": ["c"],
                "zh-Hans": ["b"],
                "zh-Hant": ["a"],
            },
        )

        assert expanded.keyword_queries == ["a", "b", "c"]

    def test_unknown_languages_come_last(self):
        expanded = ExpandedQuery(
            semantic_query="q",
            keyword_queries_by_language={"ja": ["x"], "en": ["c"]},
        )

        assert expanded.keyword_queries == ["c", "x"]

    def test_no_keyword_queries(self):
        assert ExpandedQuery(semantic_query="q").keyword_queries == []


class TestQueryExpander:
    """Test suite for QueryExpander."""

    @pytest.mark.asyncio
    async def test_expand(self, mock_llm):
        expander = QueryExpander(mock_llm)

        expanded = await expander.expand("cobalt supply risk?")

        assert expanded.semantic_query == "How exposed is cobalt supply to trade disruption?"
        assert expanded.keyword_queries == ["鈷供應", "钴供应", "cobalt supply", "trade disruption"]

    @pytest.mark.asyncio
    async def test_prompt_contains_raw_query(self, mock_llm):
        expander = QueryExpander(mock_llm)

        await expander.expand("cobalt supply risk?")

        args = mock_llm.complete_json.call_args.args
        assert "cobalt supply risk?" in args[0]
        assert args[1] == QUERY_EXPANSION_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_unusable_answer_raises(self, mock_llm):
        mock_llm.complete_json.side_effect = ValueError("Invalid JSON in response")
        expander = QueryExpander(mock_llm)

        with pytest.raises(QueryExpansionError, match="Invalid JSON"):
            await expander.expand("cobalt supply risk?")

    @pytest.mark.asyncio
    async def test_api_failure_raises(self, mock_llm):
        mock_llm.complete_json.side_effect = APIConnectionError(
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        )
        expander = QueryExpander(mock_llm)

        with pytest.raises(QueryExpansionError, match="Query expansion failed") as exc_info:
            await expander.expand("cobalt supply risk?")

        assert isinstance(exc_info.value.__cause__, APIConnectionError)
