from .search import (
    CommentSearchResult,
    MeetingSearchResult,
    PostSearchResult,
    SearchFilters,
    SearchResult,
    SearchResultsPage,
    SearchSuggestion,
    UserSearchResult,
)

# Define the public API of this module
__all__ = [
    "SearchFilters",
    "SearchResult",
    "SearchResultsPage",
    "MeetingSearchResult",
    "PostSearchResult",
    "CommentSearchResult",
    "UserSearchResult",
    "SearchSuggestion",
]
