"""
Mock utilities for creating test data

Provides helper functions for creating users, meetings, attendances,
posts and comments. Every helper commits and refreshes the row so its
timestamps come back exactly as the database stores them.
"""

from datetime import datetime, timedelta, timezone

from meetme.models.attendance import Attendance, AttendanceStatus
from meetme.models.comment import Comment
from meetme.models.meeting import Meeting
from meetme.models.post import Post
from meetme.models.user import User


async def _save(db_session, instance):
    db_session.add(instance)
    await db_session.commit()
    await db_session.refresh(instance)
    return instance


async def create_test_user(
    db_session,
    first_name: str = "Test",
    last_name: str = "User",
    email: str | None = None,
    is_active: bool = True,
    created_at: datetime | None = None,
):
    """Create a test user"""
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email or f"{first_name}.{last_name}@example.com".lower(),
        is_active=is_active,
    )
    if created_at is not None:
        user.created_at = created_at
    return await _save(db_session, user)


async def create_test_meeting(
    db_session,
    creator_id: int,
    title: str,
    description: str = "Meeting description",
    location: str = "Conference Room A",
    start_time: datetime | None = None,
    duration: timedelta = timedelta(hours=1),
    is_active: bool = True,
    created_at: datetime | None = None,
):
    """Create a test meeting starting at ``start_time`` (default: tomorrow)"""
    start_time = start_time or datetime.now(timezone.utc) + timedelta(days=1)
    meeting = Meeting(
        title=title,
        description=description,
        location=location,
        start_time=start_time,
        end_time=start_time + duration,
        creator_id=creator_id,
        is_active=is_active,
    )
    if created_at is not None:
        meeting.created_at = created_at
    return await _save(db_session, meeting)


async def create_test_attendance(
    db_session,
    user_id: int,
    meeting_id: int,
    status: AttendanceStatus = AttendanceStatus.CONFIRMED,
    is_active: bool = True,
):
    """Create a test attendance record"""
    attendance = Attendance(user_id=user_id, meeting_id=meeting_id, status=status, is_active=is_active)
    return await _save(db_session, attendance)


async def create_test_post(
    db_session,
    author_id: int,
    meeting_id: int,
    title: str,
    content: str = "Post content",
    is_active: bool = True,
    created_at: datetime | None = None,
):
    """Create a test post"""
    post = Post(title=title, content=content, author_id=author_id, meeting_id=meeting_id, is_active=is_active)
    if created_at is not None:
        post.created_at = created_at
    return await _save(db_session, post)


async def create_test_comment(
    db_session,
    author_id: int,
    post_id: int,
    content: str,
    parent_comment_id: int | None = None,
    is_active: bool = True,
    created_at: datetime | None = None,
):
    """Create a test comment (a reply when ``parent_comment_id`` is set)"""
    comment = Comment(
        content=content,
        author_id=author_id,
        post_id=post_id,
        parent_comment_id=parent_comment_id,
        is_active=is_active,
    )
    if created_at is not None:
        comment.created_at = created_at
    return await _save(db_session, comment)
