"""SQLAlchemy models for persisted search state."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tagsearch.db.base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SearchHistoryEntry(Base):
    __tablename__ = "search_history"
    __table_args__ = (UniqueConstraint("query", name="uq_search_history_query"),)

    query: Mapped[str] = mapped_column(String(512), nullable=False)
    # Higher position means more recently used.
    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )


__all__ = ["SearchHistoryEntry"]
