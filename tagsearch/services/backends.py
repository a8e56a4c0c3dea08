"""Search capabilities consumed by the orchestrator, plus an in-memory catalog."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Iterable, Protocol, Sequence, TypeVar

from tagsearch.domain.models import (
    Creator,
    CreatorPage,
    CreatorSortOrder,
    SearchMode,
    Tag,
    TagPage,
)
from tagsearch.utils.text import normalize_text

T = TypeVar("T")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class SearchBackend(Protocol):
    async def search_tags_by_name(
        self, and_query: str, or_query: str, offset: int, limit: int
    ) -> TagPage: ...

    async def search_creators_by_tags(
        self, tag_ids: Sequence[str], mode: SearchMode, offset: int, limit: int
    ) -> CreatorPage: ...


def paginate(items: Sequence[T], offset: int, limit: int) -> tuple[list[T], bool, int]:
    """Slice ``items`` into a page; returns (page, has_more, total_count)."""

    total = len(items)
    if offset >= total or limit <= 0:
        return [], False, total
    end = min(offset + limit, total)
    return list(items[offset:end]), end < total, total


def _terms(query: str) -> list[str]:
    return normalize_text(query).split()


def _created_key(creator: Creator) -> datetime:
    created = creator.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def sort_creators(creators: Iterable[Creator], order: CreatorSortOrder) -> list[Creator]:
    if order is CreatorSortOrder.NEWEST:
        return sorted(creators, key=_created_key, reverse=True)
    if order is CreatorSortOrder.NAME:
        return sorted(creators, key=lambda creator: creator.name)
    return sorted(creators, key=lambda creator: creator.view_count, reverse=True)


class InMemorySearchBackend:
    """Serves canned tags and creators with optional artificial latency."""

    def __init__(
        self,
        tags: Iterable[Tag] = (),
        creators: Iterable[Creator] = (),
        *,
        latency_seconds: float = 0.0,
        sort_order: CreatorSortOrder = CreatorSortOrder.POPULARITY,
    ) -> None:
        self.tags = list(tags)
        self.creators = list(creators)
        self.latency_seconds = latency_seconds
        self.sort_order = sort_order

    async def _delay(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

    async def search_tags_by_name(
        self, and_query: str, or_query: str, offset: int, limit: int
    ) -> TagPage:
        await self._delay()
        required = _terms(and_query)
        optional = _terms(or_query)

        matches = []
        for tag in self.tags:
            name = normalize_text(tag.display_name)
            if not all(term in name for term in required):
                continue
            if optional and not any(term in name for term in optional):
                continue
            matches.append(tag)

        page, has_more, total = paginate(matches, offset, limit)
        return TagPage(tags=page, has_more=has_more, total_count=total)

    async def search_creators_by_tags(
        self, tag_ids: Sequence[str], mode: SearchMode, offset: int, limit: int
    ) -> CreatorPage:
        await self._delay()
        mode = SearchMode(mode)
        matches = [creator for creator in self.creators if creator.has_tags(tag_ids, mode)]
        ordered = sort_creators(matches, self.sort_order)

        page, has_more, total = paginate(ordered, offset, limit)
        return CreatorPage(creators=page, has_more=has_more, total_count=total)


__all__ = ["InMemorySearchBackend", "SearchBackend", "paginate", "sort_creators"]
