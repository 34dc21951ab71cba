"""
Search Schemas

Pydantic models for search filters, results and suggestions.
"""

import math
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from meetme.models.search_query import SearchType

SEARCHABLE_TYPES = (SearchType.MEETING, SearchType.POST, SearchType.COMMENT, SearchType.USER)


class SearchFilters(BaseModel):
    """Caller-supplied search filters"""

    types: list[SearchType] = Field(default_factory=list, description="Entity types to search (global only)")
    from_date: datetime | None = Field(None, description="Inclusive lower bound on the entity timestamp")
    to_date: datetime | None = Field(None, description="Inclusive upper bound on the entity timestamp")
    authors: list[str] = Field(default_factory=list, description="Author emails or full names")
    active_only: bool = Field(True, description="Exclude inactive (cancelled / soft-deleted) rows")
    sort_by: str = Field("Relevance", description="Relevance, Date or Title")
    sort_direction: str = Field("Desc", description="Asc or Desc")

    @field_validator("types", mode="before")
    @classmethod
    def parse_types(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        parsed = []
        for item in value:
            if isinstance(item, SearchType):
                parsed.append(item)
                continue
            item = str(item).strip()
            if item:
                parsed.append(item.capitalize())
        return parsed

    @field_validator("types")
    @classmethod
    def reject_global_type(cls, value: list[SearchType]) -> list[SearchType]:
        if SearchType.GLOBAL in value:
            raise ValueError("Global is not a searchable type")
        return list(dict.fromkeys(value))

    @field_validator("authors", mode="before")
    @classmethod
    def parse_authors(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [author.strip() for author in value if author and author.strip()]

    @field_validator("from_date", "to_date")
    @classmethod
    def normalize_to_utc(cls, value: datetime | None) -> datetime | None:
        # naive values are taken as UTC
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_date_range(self) -> "SearchFilters":
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("from_date must be less than or equal to to_date")
        return self

    @property
    def ascending(self) -> bool:
        return (self.sort_direction or "").lower() == "asc"

    @property
    def sort_key(self) -> str:
        return (self.sort_by or "").lower()


class SearchResult(BaseModel):
    """Unified search result used by global search"""

    id: str
    title: str
    content: str
    type: SearchType
    author_name: str
    created_at: datetime
    last_modified_at: datetime | None = None
    relevance_score: float = Field(0.0, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchResultsPage(BaseModel):
    """Paginated global search results"""

    results: list[SearchResult]
    total_count: int = Field(..., description="Matches across all searched types before pagination")
    page: int
    page_size: int
    query: str
    type_counts: dict[str, int] = Field(default_factory=dict)
    search_duration_ms: float = 0.0

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @computed_field
    @property
    def has_previous_page(self) -> bool:
        return self.page > 1


class MeetingSearchResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    location: str
    organizer_name: str
    attendee_count: int
    is_active: bool
    created_at: datetime


class PostSearchResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    author_name: str
    meeting_id: int
    meeting_title: str
    comment_count: int
    is_active: bool
    created_at: datetime


class CommentSearchResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    author_name: str
    post_id: int
    post_title: str
    parent_comment_id: int | None = None
    is_reply: bool
    is_active: bool
    created_at: datetime


class UserSearchResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    full_name: str
    created_at: datetime
    is_active: bool


class SearchSuggestion(BaseModel):
    """Autocomplete suggestion"""

    text: str
    type: str
    count: int = 1
