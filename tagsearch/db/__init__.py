from tagsearch.db.base import Base
from tagsearch.db.models import SearchHistoryEntry
from tagsearch.db.session import Database

__all__ = ["Base", "Database", "SearchHistoryEntry"]
