"""
Search Routes

API endpoints for global and type-specific search, autocomplete
suggestions and popular search terms.
"""

import logging
from datetime import datetime
from typing import Annotated

import pydantic
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from meetme.config import settings
from meetme.database import get_db
from meetme.exceptions import SearchError, ValidationError
from meetme.middleware.logging import get_client_ip
from meetme.schemas.search import (
    CommentSearchResult,
    MeetingSearchResult,
    PostSearchResult,
    SearchFilters,
    SearchResultsPage,
    SearchSuggestion,
    UserSearchResult,
)
from meetme.services.result import ServiceResult
from meetme.services.search_service import search_service

logger = logging.getLogger(__name__)

router = APIRouter()

VALID_SORT_FIELDS = ("relevance", "date", "title")
VALID_SORT_DIRECTIONS = ("asc", "desc")


def _build_filters(
    default_sort_by: str,
    default_sort_direction: str,
    types: str | None,
    from_date: datetime | None,
    to_date: datetime | None,
    authors: str | None,
    active_only: bool,
    sort_by: str | None,
    sort_direction: str | None,
) -> SearchFilters:
    sort_by = sort_by or default_sort_by
    sort_direction = sort_direction or default_sort_direction

    if sort_by.lower() not in VALID_SORT_FIELDS:
        raise ValidationError("Invalid sort_by. Must be one of: Relevance, Date, Title", field="sort_by")
    if sort_direction.lower() not in VALID_SORT_DIRECTIONS:
        raise ValidationError("Invalid sort_direction. Must be 'Asc' or 'Desc'", field="sort_direction")

    try:
        return SearchFilters(
            types=types,
            from_date=from_date,
            to_date=to_date,
            authors=authors,
            active_only=active_only,
            sort_by=sort_by,
            sort_direction=sort_direction,
        )
    except pydantic.ValidationError as err:
        message = "; ".join(error["msg"] for error in err.errors())
        raise ValidationError(f"Invalid search filters: {message}") from err


def filter_params(default_sort_by: str, default_sort_direction: str = "Desc"):
    """Build a dependency that parses the shared filter query parameters."""

    def dependency(
        types: str | None = Query(None, description="Comma-separated types: Meeting, Post, Comment, User"),
        from_date: datetime | None = Query(None, description="Inclusive lower bound (ISO format)"),
        to_date: datetime | None = Query(None, description="Inclusive upper bound (ISO format)"),
        authors: str | None = Query(None, description="Comma-separated author emails or full names"),
        active_only: bool = Query(True, description="Exclude inactive rows"),
        sort_by: str | None = Query(None, description="Sort by: Relevance, Date, Title"),
        sort_direction: str | None = Query(None, description="Sort direction: Asc or Desc"),
    ) -> SearchFilters:
        return _build_filters(
            default_sort_by,
            default_sort_direction,
            types,
            from_date,
            to_date,
            authors,
            active_only,
            sort_by,
            sort_direction,
        )

    return dependency


def _unwrap(result: ServiceResult, operation: str):
    if result.is_failure:
        raise SearchError(result.error, operation=operation)
    return result.value


def _requester(request: Request) -> dict:
    return {
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("user-agent", ""),
    }


SearchText = Annotated[
    str, Query(min_length=2, max_length=settings.search_max_query_length, description="Search query")
]
Page = Annotated[int, Query(ge=1, description="Page number (1-based)")]
PageSize = Annotated[int, Query(ge=1, le=settings.search_max_page_size, description="Results per page")]


@router.get("/global", response_model=SearchResultsPage)
async def global_search(
    request: Request,
    query: SearchText,
    filters: SearchFilters = Depends(filter_params("Relevance")),
    page: Page = 1,
    page_size: PageSize = settings.search_default_page_size,
    db: AsyncSession = Depends(get_db),
):
    """
    Search meetings, posts, comments and users at once.

    Results are merged, ranked by relevance (or the requested sort) and then
    paginated. `type_counts` reports matches per type before pagination.
    """
    result = await search_service.global_search(db, query, filters, page, page_size, **_requester(request))
    return _unwrap(result, "global_search")


@router.get("/meetings", response_model=list[MeetingSearchResult])
async def search_meetings(
    request: Request,
    query: SearchText,
    filters: SearchFilters = Depends(filter_params("Date")),
    page: Page = 1,
    page_size: PageSize = settings.search_default_page_size,
    db: AsyncSession = Depends(get_db),
):
    """Search meetings by title, description and location."""
    result = await search_service.search_meetings(db, query, filters, page, page_size, **_requester(request))
    return _unwrap(result, "search_meetings")


@router.get("/posts", response_model=list[PostSearchResult])
async def search_posts(
    request: Request,
    query: SearchText,
    filters: SearchFilters = Depends(filter_params("Date")),
    page: Page = 1,
    page_size: PageSize = settings.search_default_page_size,
    db: AsyncSession = Depends(get_db),
):
    """Search posts by title and content."""
    result = await search_service.search_posts(db, query, filters, page, page_size, **_requester(request))
    return _unwrap(result, "search_posts")


@router.get("/comments", response_model=list[CommentSearchResult])
async def search_comments(
    request: Request,
    query: SearchText,
    filters: SearchFilters = Depends(filter_params("Date")),
    page: Page = 1,
    page_size: PageSize = settings.search_default_page_size,
    db: AsyncSession = Depends(get_db),
):
    """Search comments by content."""
    result = await search_service.search_comments(db, query, filters, page, page_size, **_requester(request))
    return _unwrap(result, "search_comments")


@router.get("/users", response_model=list[UserSearchResult])
async def search_users(
    request: Request,
    query: SearchText,
    filters: SearchFilters = Depends(filter_params("Date", "Asc")),
    page: Page = 1,
    page_size: PageSize = settings.search_default_page_size,
    db: AsyncSession = Depends(get_db),
):
    """Search users by name and email. The authors filter is ignored."""
    result = await search_service.search_users(db, query, filters, page, page_size, **_requester(request))
    return _unwrap(result, "search_users")


@router.get("/suggestions", response_model=list[SearchSuggestion])
async def get_search_suggestions(
    query: str = Query(..., min_length=1, max_length=100, description="Partial query"),
    max_suggestions: int = Query(10, ge=1, le=settings.search_max_suggestions),
    db: AsyncSession = Depends(get_db),
):
    """
    Autocomplete suggestions from meeting titles, post titles, user names
    and meeting locations.
    """
    result = await search_service.get_search_suggestions(db, query, max_suggestions)
    return _unwrap(result, "get_search_suggestions")


@router.get("/popular-terms", response_model=list[str])
async def get_popular_search_terms(
    count: int = Query(10, ge=1, le=50, description="Number of terms"),
    db: AsyncSession = Depends(get_db),
):
    """Most searched terms over the recent window, padded with defaults."""
    result = await search_service.get_popular_search_terms(db, count)
    return _unwrap(result, "get_popular_search_terms")
