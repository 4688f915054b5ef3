"""
Fire-and-forget recording of search calls.
"""
import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.models import FunctionLog

logger = logging.getLogger(__name__)


class UsageLogger:
    """
    Records who called which search function.

    ``record`` never raises and never makes the caller wait: the insert runs
    as a background task with its own session, and failures are logged.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory
        self._pending: set[asyncio.Task] = set()

    def record(
        self,
        email: str,
        called_at_ms: int,
        function_name: str,
        top_k: Optional[int] = None,
    ) -> Optional[asyncio.Task]:
        """
        Schedule a usage record insert.

        Args:
            email: Caller identity
            called_at_ms: Call time in epoch milliseconds
            function_name: Search function that was called
            top_k: Requested result count

        Returns:
            asyncio.Task or None: The background insert, or None if it could
            not be scheduled
        """
        insert = self._insert(email, called_at_ms, function_name, top_k)
        try:
            task = asyncio.create_task(insert)
        except RuntimeError as e:
            insert.close()
            logger.warning(f"Could not schedule usage log for {function_name}: {e}")
            return None

        # Held until done
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _insert(
        self,
        email: str,
        called_at_ms: int,
        function_name: str,
        top_k: Optional[int],
    ) -> None:
        try:
            async with self.session_factory() as session:
                session.add(
                    FunctionLog(
                        email=email,
                        called_at=called_at_ms,
                        function_name=function_name,
                        top_k=top_k,
                    )
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to record usage for {function_name}: {e}")
