"""
Search Tracker

Records SearchQuery audit rows in the background. Recording never blocks
or fails the search that triggered it.
"""

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from meetme import database
from meetme.config import settings
from meetme.models.search_query import SearchQuery, SearchType

logger = logging.getLogger(__name__)


class SearchTracker:
    """Fire-and-forget writer for search audit rows"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] | None = None,
        enabled: bool | None = None,
    ):
        self._session_factory = session_factory
        self._enabled = enabled
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return settings.search_analytics_enabled if self._enabled is None else self._enabled

    @property
    def pending(self) -> int:
        return len(self._pending)

    def track(
        self,
        query: str,
        search_type: SearchType,
        result_count: int,
        duration_ms: float,
        user_id: int | None = None,
        ip_address: str = "",
        user_agent: str = "",
    ) -> asyncio.Task | None:
        """
        Schedule an audit insert and return immediately.

        The returned task is only useful to tests and shutdown code;
        callers on the request path must not await it.
        """
        if not self.enabled:
            return None

        record = SearchQuery.create(
            query=query,
            search_type=search_type,
            user_id=user_id,
            result_count=result_count,
            search_duration_ms=duration_ms,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        task = asyncio.create_task(self._record(record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled audit write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _record(self, record: SearchQuery) -> None:
        try:
            # looked up at call time, not import time
            session_factory = self._session_factory or database.AsyncSessionLocal
            async with session_factory() as session:
                session.add(record)
                await session.commit()
        except Exception:
            logger.warning(
                "Failed to record search query",
                exc_info=True,
                extra={"search_type": record.search_type, "result_count": record.result_count},
            )


# Singleton instance
search_tracker = SearchTracker()
