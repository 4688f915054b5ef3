"""
Searchable corpora and how their chunk records are laid out.
"""

from dataclasses import dataclass
from enum import Enum

from src.config import Settings
from src.search.documents import FieldMapping


class CitationStyle(str, Enum):
    """How passages of a corpus are cited."""

    SELF_CONTAINED = "self_contained"
    CROSS_REFERENCE = "cross_reference"


@dataclass(frozen=True)
class CorpusProfile:
    """
    Everything the search pipeline needs to know about one corpus.

    Attributes:
        name: Corpus name, also used as the usage-log function name
        collection: ChromaDB collection holding the chunk embeddings
        index: Elasticsearch index holding the chunk text
        vector_fields: Field mapping for ChromaDB metadata
        keyword_fields: Field mapping for Elasticsearch _source documents
        citation_style: Citation variant rendered for each passage
    """

    name: str
    collection: str
    index: str
    vector_fields: FieldMapping
    keyword_fields: FieldMapping
    citation_style: CitationStyle


def textbook_profile(settings: Settings) -> CorpusProfile:
    """Textbook chunks, cited by ISBN and page."""
    return CorpusProfile(
        name="textbook_search",
        collection=settings.textbook_collection,
        index=settings.textbook_index,
        vector_fields=FieldMapping(
            parent_id="rec_id",
            author="company_name",
            identifier_code="isbn_number",
        ),
        keyword_fields=FieldMapping(
            parent_id="rec_id",
            author="author",
            identifier_code="isbn_number",
        ),
        citation_style=CitationStyle.SELF_CONTAINED,
    )


def sci_profile(settings: Settings) -> CorpusProfile:
    """Journal article chunks, cited through the journals table by DOI."""
    fields = FieldMapping(
        parent_id="doi",
        title=None,
        author=None,
        identifier_code="doi",
        publication_date="date",
        page_number=None,
        journal="journal",
    )
    return CorpusProfile(
        name="sci_search",
        collection=settings.sci_collection,
        index=settings.sci_index,
        vector_fields=fields,
        keyword_fields=fields,
        citation_style=CitationStyle.CROSS_REFERENCE,
    )
