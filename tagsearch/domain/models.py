"""Pydantic models shared by the suggestion, search and history layers."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field


class SearchMode(str, Enum):
    ALL = "all"
    ANY = "any"


class CreatorSortOrder(str, Enum):
    POPULARITY = "popularity"
    NEWEST = "newest"
    NAME = "name"


class Tag(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str


class Creator(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    related_tags: tuple[str, ...] = ()
    view_count: int = 0
    description: str = ""
    created_at: datetime | None = None

    def has_tags(self, tag_ids: Iterable[str], mode: SearchMode) -> bool:
        wanted = set(tag_ids)
        owned = set(self.related_tags)
        if mode is SearchMode.ANY:
            return not owned.isdisjoint(wanted)
        return wanted.issubset(owned)


class TagPage(BaseModel):
    tags: list[Tag] = Field(default_factory=list)
    has_more: bool = False
    total_count: int = Field(default=0, ge=0)


class CreatorPage(BaseModel):
    creators: list[Creator] = Field(default_factory=list)
    has_more: bool = False
    total_count: int = Field(default=0, ge=0)


class PageCursor(BaseModel):
    """Pagination position of the current result list."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0)
    page_size: int = Field(default=20, gt=0)
    has_more: bool = False
    total_count: int = Field(default=0, ge=0)

    def reset(self) -> PageCursor:
        return PageCursor(page_size=self.page_size)

    @property
    def next_offset(self) -> int:
        return self.offset + self.page_size


SearchStateKind = Literal["initial", "searching", "loaded_results", "empty", "error"]


class SearchState(BaseModel):
    """Exactly one of initial, searching, loaded_results, empty or error."""

    model_config = ConfigDict(frozen=True)

    kind: SearchStateKind = "initial"
    creators: tuple[Creator, ...] = ()
    title: str | None = None
    message: str | None = None

    @classmethod
    def initial(cls) -> SearchState:
        return cls(kind="initial")

    @classmethod
    def searching(cls) -> SearchState:
        return cls(kind="searching")

    @classmethod
    def loaded(cls, creators) -> SearchState:
        return cls(kind="loaded_results", creators=tuple(creators))

    @classmethod
    def empty(cls) -> SearchState:
        return cls(kind="empty")

    @classmethod
    def error(cls, title: str, message: str) -> SearchState:
        return cls(kind="error", title=title, message=message)


__all__ = [
    "Creator",
    "CreatorPage",
    "CreatorSortOrder",
    "PageCursor",
    "SearchMode",
    "SearchState",
    "SearchStateKind",
    "Tag",
    "TagPage",
]
