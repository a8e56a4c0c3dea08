from tagsearch.domain.models import (
    Creator,
    CreatorPage,
    CreatorSortOrder,
    PageCursor,
    SearchMode,
    SearchState,
    Tag,
    TagPage,
)

__all__ = [
    "Creator",
    "CreatorPage",
    "CreatorSortOrder",
    "PageCursor",
    "SearchMode",
    "SearchState",
    "Tag",
    "TagPage",
]
