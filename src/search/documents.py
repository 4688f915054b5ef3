"""
Canonical hit and passage types.

Both search backends return chunk records under their own field names.
A FieldMapping turns a backend record into the canonical Hit so that
everything after retrieval (dedup, expansion, grouping, citation) works on a
single shape regardless of where a chunk came from.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional

from src.search.identifiers import parent_of, sort_index_of


class HitOrigin(str, Enum):
    """Which retrieval stage produced a hit."""

    SIMILARITY = "similarity"
    KEYWORD = "keyword"
    EXPANSION = "expansion"


@dataclass(frozen=True)
class Hit:
    """One retrieved chunk in canonical form."""

    chunk_id: str
    parent_id: str
    sort_index: int
    text: str
    title: Optional[str] = None
    author: Optional[str] = None
    identifier_code: Optional[str] = None
    publication_date: Optional[int] = None
    page_number: Optional[int] = None
    journal: Optional[str] = None
    origin: HitOrigin = HitOrigin.SIMILARITY


@dataclass(frozen=True)
class Passage:
    """All retrieved chunks of one parent document, merged."""

    parent_id: str
    text: str
    title: Optional[str] = None
    author: Optional[str] = None
    identifier_code: Optional[str] = None
    publication_date: Optional[int] = None
    page_number: Optional[int] = None
    journal: Optional[str] = None
    source: str = ""

    def with_source(self, source: str) -> "Passage":
        return replace(self, source=source)


@dataclass(frozen=True)
class FieldMapping:
    """
    Names of the canonical Hit fields inside one backend's records.

    A field name of None means the backend does not carry that field.
    """

    parent_id: Optional[str] = None
    text: str = "text"
    title: Optional[str] = "title"
    author: Optional[str] = "author"
    identifier_code: Optional[str] = None
    publication_date: Optional[str] = "publication_date"
    page_number: Optional[str] = "page_number"
    journal: Optional[str] = None

    def to_hit(
        self,
        chunk_id: str,
        fields: Mapping[str, Any],
        origin: HitOrigin,
        document: Optional[str] = None,
    ) -> Hit:
        """
        Build a canonical Hit from a backend record.

        Args:
            chunk_id: Backend id of the chunk
            fields: Metadata (vector store) or _source (keyword store)
            origin: Retrieval stage that produced the record
            document: Chunk text stored outside ``fields``, used when
                ``fields`` has no text

        Returns:
            Hit: Canonical hit
        """
        parent_id = self._get(fields, self.parent_id)
        if parent_id is None:
            parent_id = parent_of(chunk_id)

        text = fields.get(self.text) or document or ""

        return Hit(
            chunk_id=chunk_id,
            parent_id=str(parent_id),
            sort_index=sort_index_of(chunk_id),
            text=text,
            title=self._get(fields, self.title),
            author=self._get(fields, self.author),
            identifier_code=self._get(fields, self.identifier_code),
            publication_date=_as_int(self._get(fields, self.publication_date)),
            page_number=_as_int(self._get(fields, self.page_number)),
            journal=self._get(fields, self.journal),
            origin=origin,
        )

    @staticmethod
    def _get(fields: Mapping[str, Any], key: Optional[str]) -> Any:
        if key is None:
            return None
        return fields.get(key)


def _as_int(value: Any) -> Optional[int]:
    # Chroma returns stored numbers as floats
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
