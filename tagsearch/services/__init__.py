from tagsearch.services.backends import InMemorySearchBackend, SearchBackend
from tagsearch.services.history import (
    InMemorySearchHistoryStore,
    SearchHistoryStore,
    SqlSearchHistoryStore,
)
from tagsearch.services.http_backend import HttpSearchBackend
from tagsearch.services.orchestrator import SearchOrchestrator
from tagsearch.services.suggestions import TagSuggestionService

__all__ = [
    "HttpSearchBackend",
    "InMemorySearchBackend",
    "InMemorySearchHistoryStore",
    "SearchBackend",
    "SearchHistoryStore",
    "SearchOrchestrator",
    "SqlSearchHistoryStore",
    "TagSuggestionService",
]
