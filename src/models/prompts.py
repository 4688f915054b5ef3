"""
Prompt templates for Claude API interactions.
"""

# Query Expansion Prompt Template
QUERY_EXPANSION_SYSTEM_PROMPT = """You rewrite search questions for a hybrid retrieval system \
that combines vector similarity search with full-text keyword search over a multilingual \
document collection. Respond with JSON only."""

QUERY_EXPANSION_PROMPT = """Rewrite the following user question for retrieval.

Question: {query}

Produce:
1. semantic_query: one self-contained sentence capturing the information need, \
suitable for embedding-based similarity search
2. fulltext_queries: short keyword phrases for full-text search, in each of \
Traditional Chinese (zh-Hant), Simplified Chinese (zh-Hans) and English (en), \
3 to 5 phrases per language

Respond with JSON:
{{
  "semantic_query": "string",
  "fulltext_queries": {{
    "zh-Hant": ["phrase", ...],
    "zh-Hans": ["phrase", ...],
    "en": ["phrase", ...]
  }}
}}"""


def format_query_expansion_prompt(query: str) -> str:
    """
    Format the query expansion prompt.

    Args:
        query: Raw user question

    Returns:
        Formatted prompt string
    """
    return QUERY_EXPANSION_PROMPT.format(query=query)
