"""
Search module for hybrid retrieval.

Provides:
- Chunk id parsing and context windows
- Canonical filters and their backend translations
- Union/dedup, context expansion and grouping of hits
- Citation formatting
- Query expansion
"""

from src.search.documents import FieldMapping, Hit, HitOrigin, Passage
from src.search.filters import RangeBound, SearchFilter
from src.search.hybrid_search import expansion_candidates, group_passages, union_hits
from src.search.identifiers import parent_of, sort_index_of, window_of

__all__ = [
    "FieldMapping",
    "Hit",
    "HitOrigin",
    "Passage",
    "RangeBound",
    "SearchFilter",
    "expansion_candidates",
    "group_passages",
    "union_hits",
    "parent_of",
    "sort_index_of",
    "window_of",
]
