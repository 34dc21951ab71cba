from .user import User
from .meeting import Meeting
from .attendance import Attendance, AttendanceStatus
from .post import Post
from .comment import Comment
from .search_query import SearchQuery, SearchType

__all__ = [
    "User",
    "Meeting",
    "Attendance",
    "AttendanceStatus",
    "Post",
    "Comment",
    "SearchQuery",
    "SearchType",
]
