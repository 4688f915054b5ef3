"""Database and storage modules."""

from src.db.elasticsearch import ElasticsearchClient
from src.db.vector_store import VectorStore

__all__ = ["ElasticsearchClient", "VectorStore"]
