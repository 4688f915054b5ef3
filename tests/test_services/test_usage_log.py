"""
Tests for fire-and-forget usage logging.
"""
import asyncio
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from src.db.models import FunctionLog
from src.services.usage_log import UsageLogger


class TestUsageLogger:
    """Test suite for UsageLogger."""

    @pytest.mark.asyncio
    async def test_record_inserts_row(self, async_session_factory):
        usage_logger = UsageLogger(async_session_factory)

        task = usage_logger.record("a@example.com", 1_700_000_000_000, "sci_search", top_k=3)
        await task

        async with async_session_factory() as session:
            rows = (await session.execute(select(FunctionLog))).scalars().all()

        assert len(rows) == 1
        assert rows[0].email == "a@example.com"
        assert rows[0].called_at == 1_700_000_000_000
        assert rows[0].function_name == "sci_search"
        assert rows[0].top_k == 3

    @pytest.mark.asyncio
    async def test_failure_never_raises(self):
        session_factory = MagicMock(side_effect=RuntimeError("database is down"))
        usage_logger = UsageLogger(session_factory)

        task = usage_logger.record("a@example.com", 1, "textbook_search")
        await task

        assert task.exception() is None

    @pytest.mark.asyncio
    async def test_pending_tasks_released(self, async_session_factory):
        usage_logger = UsageLogger(async_session_factory)

        task = usage_logger.record("a@example.com", 1, "textbook_search")
        await task
        # Done callbacks run on the next loop iteration
        await asyncio.sleep(0)

        assert usage_logger._pending == set()

    def test_record_without_event_loop(self):
        usage_logger = UsageLogger(MagicMock())

        assert usage_logger.record("a@example.com", 1, "textbook_search") is None
