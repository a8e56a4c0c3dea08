"""Tag-based incremental creator search."""

from tagsearch.domain.models import (
    Creator,
    CreatorPage,
    PageCursor,
    SearchMode,
    SearchState,
    Tag,
    TagPage,
)
from tagsearch.services.orchestrator import SearchOrchestrator
from tagsearch.services.suggestions import generate_suggestions
from tagsearch.utils.text import normalize_text

__all__ = [
    "Creator",
    "CreatorPage",
    "PageCursor",
    "SearchMode",
    "SearchOrchestrator",
    "SearchState",
    "Tag",
    "TagPage",
    "generate_suggestions",
    "normalize_text",
]
