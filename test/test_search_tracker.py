"""
Tests for the search tracker

Tests background recording of search audit rows.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from meetme.models.search_query import SearchQuery, SearchType
from meetme.services.search_tracker import SearchTracker


class TestSearchTracker:
    async def test_track_returns_before_the_row_is_written(self, tracker, test_db):
        task = tracker.track("budget review", SearchType.POST, result_count=2, duration_ms=12.3456)

        assert isinstance(task, asyncio.Task)
        assert tracker.pending == 1

        await tracker.drain()

        assert tracker.pending == 0
        row = (await test_db.execute(select(SearchQuery))).scalars().one()
        assert row.query == "budget review"
        assert row.search_type == "Post"
        assert row.result_count == 2
        assert row.search_duration_ms == 12.35

    async def test_records_requester_details(self, tracker, test_db):
        tracker.track("agenda", SearchType.GLOBAL, 0, 1.0, ip_address="192.168.1.5", user_agent="Mozilla/5.0")
        await tracker.drain()

        row = (await test_db.execute(select(SearchQuery))).scalars().one()
        assert row.user_id is None
        assert row.ip_address == "192.168.1.5"
        assert row.user_agent == "Mozilla/5.0"

    async def test_disabled_tracker_is_a_no_op(self):
        session_factory = MagicMock()
        tracker = SearchTracker(session_factory=session_factory, enabled=False)

        assert tracker.track("team", SearchType.GLOBAL, 1, 1.0) is None
        assert tracker.pending == 0
        session_factory.assert_not_called()

    async def test_write_failure_is_logged_not_raised(self, caplog):
        tracker = SearchTracker(session_factory=MagicMock(side_effect=RuntimeError("disk full")), enabled=True)

        task = tracker.track("team", SearchType.MEETING, 1, 1.0)
        await tracker.drain()

        assert task.done()
        assert task.exception() is None
        assert "Failed to record search query" in caplog.text

    async def test_drain_waits_for_every_pending_write(self, tracker, test_db):
        for term in ("alpha", "beta", "gamma"):
            tracker.track(term, SearchType.GLOBAL, 0, 0.5)

        await tracker.drain()

        rows = (await test_db.execute(select(SearchQuery.query).order_by(SearchQuery.id))).scalars().all()
        assert sorted(rows) == ["alpha", "beta", "gamma"]
