"""
Meeting Model

A scheduled gathering created by a user. Attendees join through
Attendance rows and discuss it through Posts.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from meetme.database import Base


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    location = Column(String(500), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    max_attendees = Column(Integer, nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=lambda: datetime.now(timezone.utc), nullable=True)

    # Relationships
    creator = relationship("User", back_populates="created_meetings")
    attendances = relationship("Attendance", back_populates="meeting", cascade="all, delete-orphan")
    posts = relationship("Post", back_populates="meeting", cascade="all, delete-orphan")

    __table_args__ = (Index("ix_meetings_active_start", "is_active", "start_time"),)

    @validates("title", "description", "location")
    def _validate_required_text(self, key, value):
        if value is None or not value.strip():
            raise ValueError(f"{key.capitalize()} cannot be null or empty.")
        return value

    @validates("start_time")
    def _validate_start_time(self, key, value):
        if value is not None and self.end_time is not None and self.end_time <= value:
            raise ValueError("End time must be after start time.")
        return value

    @validates("end_time")
    def _validate_end_time(self, key, value):
        if value is not None and self.start_time is not None and value <= self.start_time:
            raise ValueError("End time must be after start time.")
        return value

    def cancel(self) -> None:
        self.is_active = False

    def __repr__(self) -> str:
        return f"<Meeting(id={self.id}, title={self.title!r})>"
