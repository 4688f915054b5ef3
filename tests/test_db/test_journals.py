"""
Tests for journal metadata lookup.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.db.journals import JournalRecord, fetch_journal_records
from src.db.models import Journal


class TestFetchJournalRecords:
    """Test suite for fetch_journal_records."""

    @pytest.mark.asyncio
    async def test_fetch_existing(self, async_db_session, sample_journals):
        records = await fetch_journal_records(
            async_db_session, ["10.1111/jiec.13000", "10.1016/j.resconrec.2023.107000"]
        )

        by_doi = {record.doi: record for record in records}
        assert by_doi["10.1111/jiec.13000"] == JournalRecord(
            doi="10.1111/jiec.13000",
            title="Global trade of critical metals",
            authors=["Alice Chen", "Bob Wang"],
        )
        assert by_doi["10.1016/j.resconrec.2023.107000"].authors == ["Carol Liu"]

    @pytest.mark.asyncio
    async def test_unknown_dois_are_absent(self, async_db_session, sample_journals):
        records = await fetch_journal_records(
            async_db_session, ["10.1111/jiec.13000", "10.9999/unknown"]
        )

        assert [record.doi for record in records] == ["10.1111/jiec.13000"]

    @pytest.mark.asyncio
    async def test_no_dois(self, async_db_session):
        assert await fetch_journal_records(async_db_session, []) == []

    @pytest.mark.asyncio
    async def test_batches_across_queries(self, async_db_session):
        for i in range(5):
            async_db_session.add(Journal(doi=f"10.1/{i}", title=f"Paper {i}", authors=[]))
        await async_db_session.commit()

        records = await fetch_journal_records(
            async_db_session, [f"10.1/{i}" for i in range(5)], batch_size=2
        )

        assert sorted(record.doi for record in records) == [f"10.1/{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_batch_size_controls_query_count(self):
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        db = MagicMock()
        db.execute = AsyncMock(return_value=result)

        await fetch_journal_records(db, [f"10.1/{i}" for i in range(801)], batch_size=400)

        assert db.execute.await_count == 3

    @pytest.mark.asyncio
    async def test_database_error_returns_none(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("gone")))

        assert await fetch_journal_records(db, ["10.1111/jiec.13000"]) is None
