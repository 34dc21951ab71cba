"""
SearchQuery Model

Audit record of one search execution. Feeds the popular search terms.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String

from meetme.database import Base


class SearchType(str, enum.Enum):
    GLOBAL = "Global"
    MEETING = "Meeting"
    POST = "Post"
    COMMENT = "Comment"
    USER = "User"


class SearchQuery(Base):
    __tablename__ = "search_queries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    query = Column(String(500), nullable=False)
    search_type = Column(String(20), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    result_count = Column(Integer, nullable=False, default=0)
    search_duration_ms = Column(Float, nullable=False, default=0.0)
    searched_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    ip_address = Column(String(64), nullable=False, default="")
    user_agent = Column(String(500), nullable=False, default="")

    __table_args__ = (Index("ix_search_queries_searched_at", "searched_at"),)

    @classmethod
    def create(
        cls,
        query: str | None,
        search_type: SearchType | str,
        user_id: int | None = None,
        result_count: int = 0,
        search_duration_ms: float = 0.0,
        ip_address: str = "",
        user_agent: str = "",
    ) -> "SearchQuery":
        return cls(
            query=(query or "").strip()[:500],
            search_type=SearchType(search_type).value,
            user_id=user_id,
            result_count=result_count,
            search_duration_ms=round(search_duration_ms, 2),
            searched_at=datetime.now(timezone.utc),
            ip_address=ip_address or "",
            user_agent=(user_agent or "")[:500],
        )

    def update_results(self, result_count: int, search_duration_ms: float) -> None:
        self.result_count = result_count
        self.search_duration_ms = round(search_duration_ms, 2)

    def __repr__(self) -> str:
        return f"<SearchQuery(id={self.id}, type={self.search_type}, query={self.query!r})>"
