"""
Tests for domain models

Tests meeting invariants and search audit row construction.
"""

from datetime import datetime, timedelta, timezone

import pytest

from meetme.models.comment import Comment
from meetme.models.meeting import Meeting
from meetme.models.search_query import SearchQuery, SearchType
from meetme.models.user import User

START = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


def build_meeting(**overrides):
    data = {
        "title": "Sprint Planning",
        "description": "Plan the next sprint",
        "location": "Room 4",
        "start_time": START,
        "end_time": START + timedelta(hours=1),
        "creator_id": 1,
    }
    data.update(overrides)
    return Meeting(**data)


class TestMeeting:
    def test_valid_meeting(self):
        meeting = build_meeting()
        assert meeting.title == "Sprint Planning"

    @pytest.mark.parametrize("field", ["title", "description", "location"])
    def test_blank_text_is_rejected(self, field):
        with pytest.raises(ValueError, match="cannot be null or empty"):
            build_meeting(**{field: "   "})

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValueError, match="End time must be after start time"):
            build_meeting(end_time=START - timedelta(minutes=5))

    def test_moving_start_past_end_is_rejected(self):
        meeting = build_meeting()
        with pytest.raises(ValueError, match="End time must be after start time"):
            meeting.start_time = START + timedelta(hours=2)

    def test_cancel_deactivates(self):
        meeting = build_meeting(is_active=True)
        meeting.cancel()
        assert meeting.is_active is False


class TestUserAndComment:
    def test_full_name(self):
        assert User(first_name="Ada", last_name="Lovelace").full_name == "Ada Lovelace"

    def test_reply_detection(self):
        assert Comment(content="top", parent_comment_id=None).is_reply is False
        assert Comment(content="reply", parent_comment_id=7).is_reply is True


class TestSearchQuery:
    def test_create_trims_query(self):
        row = SearchQuery.create("  weekly sync  ", SearchType.MEETING, user_id=3, result_count=4)

        assert row.query == "weekly sync"
        assert row.search_type == "Meeting"
        assert row.user_id == 3
        assert row.result_count == 4
        assert row.searched_at is not None

    def test_create_accepts_type_name(self):
        assert SearchQuery.create("team", "Global").search_type == "Global"

    def test_create_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            SearchQuery.create("team", "Calendar")

    def test_query_is_capped_at_500_characters(self):
        assert len(SearchQuery.create("x" * 600, SearchType.GLOBAL).query) == 500

    def test_update_results(self):
        row = SearchQuery.create("team", SearchType.GLOBAL)
        row.update_results(9, 3.14159)

        assert row.result_count == 9
        assert row.search_duration_ms == 3.14
