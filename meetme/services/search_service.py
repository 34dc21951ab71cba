"""
Search Service

Text search across meetings, posts, comments and users with filtering,
sorting, pagination and an additive relevance score. Also provides
autocomplete suggestions and popular search terms derived from the
recorded search history.

Every public operation returns a ServiceResult and never raises: store
failures become failure results prefixed with the operation name.
"""

import asyncio
import logging
import time
from collections import Counter
from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from meetme.config import settings
from meetme.constants.search import FALLBACK_TERMS, MIN_TERM_LENGTH
from meetme.exceptions import OperationCancelledError, ValidationError
from meetme.models.attendance import AttendanceStatus
from meetme.models.comment import Comment
from meetme.models.meeting import Meeting
from meetme.models.post import Post
from meetme.models.search_query import SearchQuery, SearchType
from meetme.models.user import User
from meetme.schemas.search import (
    SEARCHABLE_TYPES,
    CommentSearchResult,
    MeetingSearchResult,
    PostSearchResult,
    SearchFilters,
    SearchResult,
    SearchResultsPage,
    SearchSuggestion,
    UserSearchResult,
)
from meetme.services.result import ServiceResult
from meetme.services.search_tracker import SearchTracker, search_tracker
from meetme.utils.search_text import parse_query, relevance_score, tokenize_for_popularity

logger = logging.getLogger(__name__)


def _display_name(user: User | None) -> str:
    if user is None:
        return ""
    return f"{user.first_name} {user.last_name}"


class SearchService:
    """Service for searching meetings, posts, comments and users"""

    def __init__(self, tracker: SearchTracker | None = None):
        self.tracker = tracker or search_tracker

    # ========================================================================
    # Global search
    # ========================================================================

    async def global_search(
        self,
        db: AsyncSession,
        query: str,
        filters: SearchFilters | None = None,
        page: int = 1,
        page_size: int = 20,
        *,
        user_id: int | None = None,
        ip_address: str = "",
        user_agent: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> ServiceResult[SearchResultsPage]:
        """
        Search every requested entity type and return one merged, ranked page.

        Each type contributes all of its matches; sorting and pagination run
        on the merged list so pages are consistent across types.

        Args:
            db: Database session
            query: Raw search string
            filters: Search filters (types, dates, authors, sorting)
            page: 1-based page number
            page_size: Results per page
            user_id: Acting user, recorded with the search
            ip_address: Requester IP, recorded with the search
            user_agent: Requester user agent, recorded with the search
            cancel_event: Aborts the search when set

        Returns:
            ServiceResult wrapping a SearchResultsPage
        """
        start_time = time.perf_counter()
        try:
            self._validate_paging(page, page_size)
            filters = filters or SearchFilters()
            terms = parse_query(query)
            search_types = filters.types or list(SEARCHABLE_TYPES)

            results: list[SearchResult] = []
            type_counts: dict[str, int] = {}
            for search_type in search_types:
                routine = self._INTERNAL_ROUTINES[search_type]
                type_results = await routine(self, db, terms, filters, cancel_event)
                results.extend(type_results)
                type_counts[search_type.value] = len(type_results)

            results = self._sort_merged(results, filters)
            total_count = len(results)
            offset = (page - 1) * page_size
            duration_ms = (time.perf_counter() - start_time) * 1000

            search_page = SearchResultsPage(
                results=results[offset : offset + page_size],
                total_count=total_count,
                page=page,
                page_size=page_size,
                query=query or "",
                type_counts=type_counts,
                search_duration_ms=round(duration_ms, 2),
            )
        except Exception as exc:
            return self._failure("Global search failed", exc)

        logger.debug(f"Global search for {query!r} matched {total_count} rows in {duration_ms:.2f}ms")
        self._track(query, SearchType.GLOBAL, total_count, duration_ms, user_id, ip_address, user_agent)
        return ServiceResult.ok(search_page)

    # ========================================================================
    # Type-specific search
    # ========================================================================

    async def search_meetings(
        self,
        db: AsyncSession,
        query: str,
        filters: SearchFilters | None = None,
        page: int = 1,
        page_size: int = 20,
        *,
        user_id: int | None = None,
        ip_address: str = "",
        user_agent: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> ServiceResult[list[MeetingSearchResult]]:
        """
        Search meetings by title, description and location.

        Date filters apply to the meeting start time. Supported sort keys:
        date (start time) and title; anything else sorts newest first.
        """
        start_time = time.perf_counter()
        try:
            self._validate_paging(page, page_size)
            filters = filters or SearchFilters(sort_by="Date")
            terms = parse_query(query)
            meetings = []
            if terms:
                stmt = self._meeting_statement(terms, filters, match_location=True)
                stmt = self._paginate(self._order_meetings(stmt, filters), page, page_size)
                meetings = await self._fetch(db, stmt, cancel_event)
            results = [self._to_meeting_result(meeting) for meeting in meetings]
        except Exception as exc:
            return self._failure("Meeting search failed", exc)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._track(query, SearchType.MEETING, len(results), duration_ms, user_id, ip_address, user_agent)
        return ServiceResult.ok(results)

    async def search_posts(
        self,
        db: AsyncSession,
        query: str,
        filters: SearchFilters | None = None,
        page: int = 1,
        page_size: int = 20,
        *,
        user_id: int | None = None,
        ip_address: str = "",
        user_agent: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> ServiceResult[list[PostSearchResult]]:
        """Search posts by title and content."""
        start_time = time.perf_counter()
        try:
            self._validate_paging(page, page_size)
            filters = filters or SearchFilters(sort_by="Date")
            terms = parse_query(query)
            posts = []
            if terms:
                stmt = self._post_statement(terms, filters)
                stmt = self._paginate(self._order_posts(stmt, filters), page, page_size)
                posts = await self._fetch(db, stmt, cancel_event)
            results = [self._to_post_result(post) for post in posts]
        except Exception as exc:
            return self._failure("Post search failed", exc)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._track(query, SearchType.POST, len(results), duration_ms, user_id, ip_address, user_agent)
        return ServiceResult.ok(results)

    async def search_comments(
        self,
        db: AsyncSession,
        query: str,
        filters: SearchFilters | None = None,
        page: int = 1,
        page_size: int = 20,
        *,
        user_id: int | None = None,
        ip_address: str = "",
        user_agent: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> ServiceResult[list[CommentSearchResult]]:
        """Search comments by content. Only the date sort key is supported."""
        start_time = time.perf_counter()
        try:
            self._validate_paging(page, page_size)
            filters = filters or SearchFilters(sort_by="Date")
            terms = parse_query(query)
            comments = []
            if terms:
                stmt = self._comment_statement(terms, filters)
                stmt = self._paginate(self._order_comments(stmt, filters), page, page_size)
                comments = await self._fetch(db, stmt, cancel_event)
            results = [self._to_comment_result(comment) for comment in comments]
        except Exception as exc:
            return self._failure("Comment search failed", exc)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._track(query, SearchType.COMMENT, len(results), duration_ms, user_id, ip_address, user_agent)
        return ServiceResult.ok(results)

    async def search_users(
        self,
        db: AsyncSession,
        query: str,
        filters: SearchFilters | None = None,
        page: int = 1,
        page_size: int = 20,
        *,
        user_id: int | None = None,
        ip_address: str = "",
        user_agent: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> ServiceResult[list[UserSearchResult]]:
        """
        Search users by first name, last name and email.

        The author filter does not apply to users. Defaults to oldest first.
        """
        start_time = time.perf_counter()
        try:
            self._validate_paging(page, page_size)
            filters = filters or SearchFilters(sort_by="Date", sort_direction="Asc")
            terms = parse_query(query)
            users = []
            if terms:
                stmt = self._user_statement(terms, filters)
                stmt = self._paginate(self._order_users(stmt, filters), page, page_size)
                users = await self._fetch(db, stmt, cancel_event)
            results = [self._to_user_result(user) for user in users]
        except Exception as exc:
            return self._failure("User search failed", exc)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._track(query, SearchType.USER, len(results), duration_ms, user_id, ip_address, user_agent)
        return ServiceResult.ok(results)

    # ========================================================================
    # Suggestions & popular terms
    # ========================================================================

    async def get_search_suggestions(
        self,
        db: AsyncSession,
        query: str,
        max_suggestions: int = 10,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ServiceResult[list[SearchSuggestion]]:
        """
        Autocomplete candidates from meeting titles, post titles, user names
        and meeting locations.

        Each category contributes at most ``max_suggestions // 4`` entries;
        the combined list is capped at ``max_suggestions``.
        """
        try:
            pattern = (query or "").strip().lower()
            per_category = max_suggestions // 4
            if not pattern or per_category <= 0:
                return ServiceResult.ok([])

            suggestions: list[SearchSuggestion] = []

            meeting_titles = await self._fetch_column(
                db,
                select(Meeting.title)
                .where(Meeting.is_active.is_(True), func.lower(Meeting.title).contains(pattern, autoescape=True))
                .order_by(Meeting.title)
                .limit(per_category),
                cancel_event,
            )
            suggestions.extend(SearchSuggestion(text=title, type="Meeting") for title in meeting_titles)

            post_titles = await self._fetch_column(
                db,
                select(Post.title)
                .where(Post.is_active.is_(True), func.lower(Post.title).contains(pattern, autoescape=True))
                .order_by(Post.title)
                .limit(per_category),
                cancel_event,
            )
            suggestions.extend(SearchSuggestion(text=title, type="Post") for title in post_titles)

            self._check_cancelled(cancel_event)
            user_rows = await db.execute(
                select(User.first_name, User.last_name)
                .where(
                    User.is_active.is_(True),
                    or_(
                        func.lower(User.first_name).contains(pattern, autoescape=True),
                        func.lower(User.last_name).contains(pattern, autoescape=True),
                    ),
                )
                .order_by(User.first_name, User.last_name)
                .limit(per_category)
            )
            suggestions.extend(
                SearchSuggestion(text=f"{first_name} {last_name}", type="User")
                for first_name, last_name in user_rows.all()
            )

            locations = await self._fetch_column(
                db,
                select(Meeting.location)
                .where(Meeting.is_active.is_(True), func.lower(Meeting.location).contains(pattern, autoescape=True))
                .distinct()
                .order_by(Meeting.location)
                .limit(per_category),
                cancel_event,
            )
            suggestions.extend(SearchSuggestion(text=location, type="Location") for location in locations)

            return ServiceResult.ok(suggestions[:max_suggestions])
        except Exception as exc:
            return self._failure("Search suggestions failed", exc)

    async def get_popular_search_terms(
        self,
        db: AsyncSession,
        count: int = 10,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ServiceResult[list[str]]:
        """
        Most frequent search tokens over the trailing window.

        Tokens are lower-cased, stop words and one-letter tokens are dropped.
        When history is sparse the list is padded with fallback terms.

        Args:
            db: Database session
            count: Number of terms wanted

        Returns:
            ServiceResult wrapping up to ``count`` terms
        """
        try:
            if count <= 0:
                return ServiceResult.ok([])

            since = datetime.now(timezone.utc) - timedelta(days=settings.search_popular_terms_window_days)
            queries = await self._fetch_column(
                db,
                select(SearchQuery.query).where(
                    SearchQuery.searched_at >= since,
                    func.length(func.trim(SearchQuery.query)) >= MIN_TERM_LENGTH,
                ).order_by(SearchQuery.searched_at, SearchQuery.id),
                cancel_event,
            )

            counter: Counter[str] = Counter()
            for recorded in queries:
                counter.update(tokenize_for_popularity(recorded))

            popular_terms = [term for term, _ in counter.most_common(count)]

            if len(popular_terms) < count:
                for term in FALLBACK_TERMS:
                    if len(popular_terms) >= count:
                        break
                    if term not in popular_terms:
                        popular_terms.append(term)

            return ServiceResult.ok(popular_terms)
        except Exception as exc:
            return self._failure("Popular search terms failed", exc)

    # ========================================================================
    # Internal routines used by global search (unpaginated)
    # ========================================================================

    async def _meetings_internal(self, db, terms, filters, cancel_event) -> list[SearchResult]:
        if not terms:
            return []
        meetings = await self._fetch(db, self._meeting_statement(terms, filters), cancel_event)
        return [
            SearchResult(
                id=str(meeting.id),
                title=meeting.title,
                content=meeting.description,
                type=SearchType.MEETING,
                author_name=_display_name(meeting.creator),
                created_at=meeting.created_at,
                last_modified_at=meeting.updated_at,
                relevance_score=relevance_score(f"{meeting.title} {meeting.description}", terms),
                metadata={"start_time": meeting.start_time, "location": meeting.location},
            )
            for meeting in meetings
        ]

    async def _posts_internal(self, db, terms, filters, cancel_event) -> list[SearchResult]:
        if not terms:
            return []
        posts = await self._fetch(db, self._post_statement(terms, filters), cancel_event)
        return [
            SearchResult(
                id=str(post.id),
                title=post.title,
                content=post.content,
                type=SearchType.POST,
                author_name=_display_name(post.author),
                created_at=post.created_at,
                last_modified_at=post.updated_at,
                relevance_score=relevance_score(f"{post.title} {post.content}", terms),
                metadata={"meeting_id": post.meeting_id, "meeting_title": post.meeting.title},
            )
            for post in posts
        ]

    async def _comments_internal(self, db, terms, filters, cancel_event) -> list[SearchResult]:
        if not terms:
            return []
        comments = await self._fetch(db, self._comment_statement(terms, filters), cancel_event)
        return [
            SearchResult(
                id=str(comment.id),
                title=f"Comment on: {comment.post.title}",
                content=comment.content,
                type=SearchType.COMMENT,
                author_name=_display_name(comment.author),
                created_at=comment.created_at,
                last_modified_at=comment.updated_at,
                relevance_score=relevance_score(comment.content, terms),
                metadata={
                    "post_id": comment.post_id,
                    "post_title": comment.post.title,
                    "is_reply": comment.is_reply,
                },
            )
            for comment in comments
        ]

    async def _users_internal(self, db, terms, filters, cancel_event) -> list[SearchResult]:
        if not terms:
            return []
        users = await self._fetch(db, self._user_statement(terms, filters), cancel_event)
        results = []
        for user in users:
            full_name = _display_name(user)
            results.append(
                SearchResult(
                    id=str(user.id),
                    title=full_name,
                    content=user.email,
                    type=SearchType.USER,
                    author_name=full_name,
                    created_at=user.created_at,
                    last_modified_at=user.updated_at,
                    relevance_score=relevance_score(f"{full_name} {user.email}", terms),
                    metadata={"email": user.email, "full_name": full_name},
                )
            )
        return results

    _INTERNAL_ROUTINES = {
        SearchType.MEETING: _meetings_internal,
        SearchType.POST: _posts_internal,
        SearchType.COMMENT: _comments_internal,
        SearchType.USER: _users_internal,
    }

    # ========================================================================
    # Statement builders
    # ========================================================================

    @staticmethod
    def _text_condition(columns, terms: list[str]):
        """Any term is a case-insensitive substring of any column."""
        return or_(
            *(func.lower(column).contains(term.lower(), autoescape=True) for term in terms for column in columns)
        )

    @staticmethod
    def _author_condition(authors: list[str]):
        lowered = [author.lower() for author in authors]
        return or_(
            func.lower(User.email).in_(lowered),
            func.lower(User.first_name + " " + User.last_name).in_(lowered),
        )

    @staticmethod
    def _date_conditions(column, filters: SearchFilters) -> list:
        conditions = []
        if filters.from_date:
            conditions.append(column >= filters.from_date)
        if filters.to_date:
            conditions.append(column <= filters.to_date)
        return conditions

    def _meeting_statement(self, terms: list[str], filters: SearchFilters, match_location: bool = False):
        columns = [Meeting.title, Meeting.description]
        if match_location:
            columns.append(Meeting.location)

        conditions = [self._text_condition(columns, terms)]
        if filters.active_only:
            conditions.append(Meeting.is_active.is_(True))
        conditions.extend(self._date_conditions(Meeting.start_time, filters))
        if filters.authors:
            conditions.append(Meeting.creator.has(self._author_condition(filters.authors)))

        return (
            select(Meeting)
            .options(joinedload(Meeting.creator), selectinload(Meeting.attendances))
            .where(and_(*conditions))
        )

    def _post_statement(self, terms: list[str], filters: SearchFilters):
        conditions = [self._text_condition([Post.title, Post.content], terms)]
        if filters.active_only:
            conditions.append(Post.is_active.is_(True))
        conditions.extend(self._date_conditions(Post.created_at, filters))
        if filters.authors:
            conditions.append(Post.author.has(self._author_condition(filters.authors)))

        return (
            select(Post)
            .options(joinedload(Post.author), joinedload(Post.meeting), selectinload(Post.comments))
            .where(and_(*conditions))
        )

    def _comment_statement(self, terms: list[str], filters: SearchFilters):
        conditions = [self._text_condition([Comment.content], terms)]
        if filters.active_only:
            conditions.append(Comment.is_active.is_(True))
        conditions.extend(self._date_conditions(Comment.created_at, filters))
        if filters.authors:
            conditions.append(Comment.author.has(self._author_condition(filters.authors)))

        return (
            select(Comment)
            .options(joinedload(Comment.author), joinedload(Comment.post))
            .where(and_(*conditions))
        )

    def _user_statement(self, terms: list[str], filters: SearchFilters):
        conditions = [self._text_condition([User.first_name, User.last_name, User.email], terms)]
        if filters.active_only:
            conditions.append(User.is_active.is_(True))
        conditions.extend(self._date_conditions(User.created_at, filters))

        return select(User).where(and_(*conditions))

    # ========================================================================
    # Sorting & pagination
    # ========================================================================

    @staticmethod
    def _order_meetings(stmt, filters: SearchFilters):
        direction = asc if filters.ascending else desc
        if filters.sort_key == "date":
            return stmt.order_by(direction(Meeting.start_time), Meeting.id)
        if filters.sort_key == "title":
            return stmt.order_by(direction(Meeting.title), Meeting.id)
        return stmt.order_by(Meeting.created_at.desc(), Meeting.id.desc())

    @staticmethod
    def _order_posts(stmt, filters: SearchFilters):
        direction = asc if filters.ascending else desc
        if filters.sort_key == "date":
            return stmt.order_by(direction(Post.created_at), Post.id)
        if filters.sort_key == "title":
            return stmt.order_by(direction(Post.title), Post.id)
        return stmt.order_by(Post.created_at.desc(), Post.id.desc())

    @staticmethod
    def _order_comments(stmt, filters: SearchFilters):
        if filters.sort_key == "date":
            direction = asc if filters.ascending else desc
            return stmt.order_by(direction(Comment.created_at), Comment.id)
        return stmt.order_by(Comment.created_at.desc(), Comment.id.desc())

    @staticmethod
    def _order_users(stmt, filters: SearchFilters):
        direction = asc if filters.ascending else desc
        if filters.sort_key == "date":
            return stmt.order_by(direction(User.created_at), User.id)
        if filters.sort_key == "title":
            return stmt.order_by(direction(User.first_name), direction(User.last_name), User.id)
        return stmt.order_by(User.created_at.desc(), User.id.desc())

    @staticmethod
    def _sort_merged(results: list[SearchResult], filters: SearchFilters) -> list[SearchResult]:
        if filters.sort_key == "date":
            return sorted(results, key=lambda r: r.created_at, reverse=not filters.ascending)
        if filters.sort_key == "title":
            return sorted(results, key=lambda r: r.title.casefold(), reverse=not filters.ascending)
        return sorted(results, key=lambda r: (r.relevance_score, r.created_at), reverse=True)

    @staticmethod
    def _paginate(stmt, page: int, page_size: int):
        return stmt.offset((page - 1) * page_size).limit(page_size)

    @staticmethod
    def _validate_paging(page: int, page_size: int) -> None:
        if page < 1:
            raise ValidationError("Page must be greater than 0", field="page")
        if page_size < 1:
            raise ValidationError("Page size must be greater than 0", field="page_size")

    # ========================================================================
    # Projections
    # ========================================================================

    @staticmethod
    def _to_meeting_result(meeting: Meeting) -> MeetingSearchResult:
        return MeetingSearchResult(
            id=meeting.id,
            title=meeting.title,
            description=meeting.description,
            start_time=meeting.start_time,
            end_time=meeting.end_time,
            location=meeting.location,
            organizer_name=_display_name(meeting.creator),
            attendee_count=sum(
                1
                for attendance in meeting.attendances
                if attendance.is_active and attendance.status == AttendanceStatus.CONFIRMED
            ),
            is_active=meeting.is_active,
            created_at=meeting.created_at,
        )

    @staticmethod
    def _to_post_result(post: Post) -> PostSearchResult:
        return PostSearchResult(
            id=post.id,
            title=post.title,
            content=post.content,
            author_name=_display_name(post.author),
            meeting_id=post.meeting_id,
            meeting_title=post.meeting.title,
            comment_count=sum(1 for comment in post.comments if comment.is_active),
            is_active=post.is_active,
            created_at=post.created_at,
        )

    @staticmethod
    def _to_comment_result(comment: Comment) -> CommentSearchResult:
        return CommentSearchResult(
            id=comment.id,
            content=comment.content,
            author_name=_display_name(comment.author),
            post_id=comment.post_id,
            post_title=comment.post.title,
            parent_comment_id=comment.parent_comment_id,
            is_reply=comment.is_reply,
            is_active=comment.is_active,
            created_at=comment.created_at,
        )

    @staticmethod
    def _to_user_result(user: User) -> UserSearchResult:
        return UserSearchResult(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            full_name=user.full_name,
            created_at=user.created_at,
            is_active=user.is_active,
        )

    # ========================================================================
    # Execution helpers
    # ========================================================================

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelledError()

    async def _fetch(self, db: AsyncSession, stmt, cancel_event: asyncio.Event | None = None) -> list:
        self._check_cancelled(cancel_event)
        result = await db.execute(stmt)
        return list(result.unique().scalars().all())

    async def _fetch_column(self, db: AsyncSession, stmt, cancel_event: asyncio.Event | None = None) -> list:
        self._check_cancelled(cancel_event)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def _failure(prefix: str, exc: Exception) -> ServiceResult:
        message = f"{prefix}: {exc}"
        logger.warning(message, exc_info=not isinstance(exc, (ValidationError, OperationCancelledError)))
        return ServiceResult.fail(message)

    def _track(
        self,
        query: str,
        search_type: SearchType,
        result_count: int,
        duration_ms: float,
        user_id: int | None,
        ip_address: str,
        user_agent: str,
    ) -> None:
        try:
            self.tracker.track(
                query=query,
                search_type=search_type,
                result_count=result_count,
                duration_ms=duration_ms,
                user_id=user_id,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except Exception:
            logger.warning("Failed to schedule search query tracking", exc_info=True)


# Singleton instance
search_service = SearchService()
