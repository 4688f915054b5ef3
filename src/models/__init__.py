"""
Models module: embeddings, LLM client and API schemas.
"""
from src.models.embeddings import QueryEmbedder
from src.models.schemas import ErrorResponse, RangeFilter, SearchRequest, SearchResultItem

__all__ = [
    "QueryEmbedder",
    "ErrorResponse",
    "RangeFilter",
    "SearchRequest",
    "SearchResultItem",
]
