"""
Journal metadata lookup for citing journal article passages.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Journal

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 400


@dataclass(frozen=True)
class JournalRecord:
    """Bibliographic fields needed to cite a journal article."""

    doi: str
    title: str
    authors: list[str]


async def fetch_journal_records(
    db: AsyncSession,
    dois: Sequence[str],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Optional[list[JournalRecord]]:
    """
    Fetch journal records for a list of DOIs.

    DOIs are queried in batches of at most ``batch_size``, one batch at a
    time.

    Args:
        db: Database session
        dois: DOIs to look up
        batch_size: Maximum DOIs per query

    Returns:
        list or None: Records found, or None if any batch failed
    """
    records: list[JournalRecord] = []

    for start in range(0, len(dois), batch_size):
        batch = list(dois[start:start + batch_size])
        try:
            result = await db.execute(select(Journal).where(Journal.doi.in_(batch)))
        except SQLAlchemyError as e:
            logger.error(f"Journal lookup failed for batch of {len(batch)} DOIs: {e}")
            return None

        for journal in result.scalars().all():
            records.append(
                JournalRecord(
                    doi=journal.doi,
                    title=journal.title,
                    authors=list(journal.authors or []),
                )
            )

    logger.info(f"Journal lookup: {len(dois)} DOIs -> {len(records)} records")

    return records
