"""
Citation strings for merged passages.

Two styles are supported:
- self-contained: everything comes from the chunk metadata (textbooks)
- cross-reference: title and authors come from the journals table, looked
  up by DOI (journal articles)
"""

from datetime import datetime, timezone
from typing import Mapping, Optional

from src.db.journals import JournalRecord
from src.search.documents import Passage
from src.search.exceptions import CitationRecordMissingError

DOI_URL_PREFIX = "https://doi.org/"


def format_date(timestamp: Optional[int]) -> str:
    """Render epoch seconds as YYYY-MM-DD (UTC)."""
    if timestamp is None:
        return ""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def format_year_month(timestamp: Optional[int]) -> str:
    """Render epoch seconds as YYYY-MM (UTC)."""
    if timestamp is None:
        return ""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m")


def format_textbook_citation(passage: Passage) -> str:
    """
    Cite a passage from its own metadata.

    Example:
        "Industrial Ecology(ISBN: 978-0-13-046713-5), Graedel. 2023-11-14(P12). "
    """
    return (
        f"{passage.title}(ISBN: {passage.identifier_code}), {passage.author}. "
        f"{format_date(passage.publication_date)}(P{passage.page_number}). "
    )


def format_journal_citation(
    passage: Passage,
    records: Mapping[str, JournalRecord],
) -> str:
    """
    Cite a passage as a markdown link to its DOI.

    Args:
        passage: Merged passage whose identifier_code is a DOI
        records: Journal records keyed by DOI

    Returns:
        str: "[title, journal. authors. YYYY-MM.](https://doi.org/<doi>)"

    Raises:
        CitationRecordMissingError: If no record exists for the passage DOI
    """
    doi = passage.identifier_code or passage.parent_id
    record = records.get(doi)
    if record is None:
        raise CitationRecordMissingError(doi)

    authors = ", ".join(record.authors)
    journal = passage.journal or ""
    date = format_year_month(passage.publication_date)
    return f"[{record.title}, {journal}. {authors}. {date}.]({DOI_URL_PREFIX}{record.doi})"
