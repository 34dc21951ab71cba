"""
Tests for search schemas

Tests filter parsing and validation and computed pagination fields.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from meetme.models.search_query import SearchType
from meetme.schemas.search import SearchFilters, SearchResultsPage


class TestSearchFilters:
    def test_defaults(self):
        filters = SearchFilters()

        assert filters.types == []
        assert filters.active_only is True
        assert filters.sort_key == "relevance"
        assert filters.ascending is False

    def test_types_from_comma_separated_string(self):
        filters = SearchFilters(types="meeting, POST,comment")
        assert filters.types == [SearchType.MEETING, SearchType.POST, SearchType.COMMENT]

    def test_duplicate_types_are_collapsed(self):
        assert SearchFilters(types=["User", "user"]).types == [SearchType.USER]

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            SearchFilters(types=["Calendar"])

    def test_global_is_not_a_searchable_type(self):
        with pytest.raises(ValidationError, match="Global is not a searchable type"):
            SearchFilters(types=["Global"])

    def test_authors_from_comma_separated_string(self):
        assert SearchFilters(authors="alice@example.com, Bob Jones,").authors == ["alice@example.com", "Bob Jones"]

    def test_inverted_date_range_is_rejected(self):
        with pytest.raises(ValidationError, match="from_date must be less than or equal to to_date"):
            SearchFilters(
                from_date=datetime(2026, 2, 1, tzinfo=timezone.utc),
                to_date=datetime(2026, 1, 1, tzinfo=timezone.utc),
            )

    def test_dates_are_normalized_to_utc(self):
        filters = SearchFilters(
            from_date=datetime(2026, 1, 10, 10, 0, tzinfo=timezone(timedelta(hours=2))),
            to_date=datetime(2026, 1, 10, 9, 0),
        )

        assert filters.from_date == datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc)
        assert filters.from_date.tzinfo == timezone.utc
        assert filters.to_date == datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc)

    def test_mixed_timezone_inverted_range_is_rejected(self):
        with pytest.raises(ValidationError, match="from_date must be less than or equal to to_date"):
            SearchFilters(
                from_date=datetime(2026, 1, 10, 12, 0, tzinfo=timezone(timedelta(hours=2))),
                to_date=datetime(2026, 1, 10, 9, 0),
            )

    def test_sort_is_case_insensitive(self):
        filters = SearchFilters(sort_by="DATE", sort_direction="ASC")
        assert filters.sort_key == "date"
        assert filters.ascending is True


class TestSearchResultsPage:
    def test_pagination_fields(self):
        page = SearchResultsPage(results=[], total_count=45, page=2, page_size=20, query="team")

        assert page.total_pages == 3
        assert page.has_next_page is True
        assert page.has_previous_page is True

    def test_last_page(self):
        page = SearchResultsPage(results=[], total_count=40, page=2, page_size=20, query="team")

        assert page.total_pages == 2
        assert page.has_next_page is False

    def test_computed_fields_are_serialized(self):
        dumped = SearchResultsPage(results=[], total_count=0, page=1, page_size=20, query="").model_dump()
        assert dumped["total_pages"] == 0
        assert dumped["has_next_page"] is False
