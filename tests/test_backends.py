"""Tests for the in-memory search catalog."""

from __future__ import annotations

import pytest

from conftest import SAMPLE_CREATORS, SAMPLE_TAGS

from tagsearch.domain.models import CreatorSortOrder, SearchMode
from tagsearch.services.backends import InMemorySearchBackend, paginate


@pytest.fixture
def catalog() -> InMemorySearchBackend:
    return InMemorySearchBackend(SAMPLE_TAGS, SAMPLE_CREATORS)


def test_paginate_bounds():
    assert paginate([1, 2, 3], 0, 2) == ([1, 2], True, 3)
    assert paginate([1, 2, 3], 2, 2) == ([3], False, 3)
    assert paginate([1, 2, 3], 5, 2) == ([], False, 3)


@pytest.mark.asyncio
async def test_all_mode_requires_every_tag(catalog):
    page = await catalog.search_creators_by_tags(["t1", "t2"], SearchMode.ALL, 0, 20)
    assert [creator.id for creator in page.creators] == ["c3", "c2"]
    assert page.total_count == 2
    assert page.has_more is False


@pytest.mark.asyncio
async def test_any_mode_accepts_one_tag(catalog):
    page = await catalog.search_creators_by_tags(["t5", "t6"], SearchMode.ANY, 0, 20)
    assert [creator.id for creator in page.creators] == ["c2", "c5", "c1"]


@pytest.mark.asyncio
async def test_creator_pagination_reports_has_more(catalog):
    first = await catalog.search_creators_by_tags(["t1"], SearchMode.ALL, 0, 2)
    second = await catalog.search_creators_by_tags(["t1"], SearchMode.ALL, 2, 2)
    beyond = await catalog.search_creators_by_tags(["t1"], SearchMode.ALL, 10, 2)

    assert [creator.id for creator in first.creators] == ["c3", "c2"]
    assert first.has_more is True
    assert [creator.id for creator in second.creators] == ["c1"]
    assert second.has_more is False
    assert beyond.creators == []
    assert beyond.total_count == 3


@pytest.mark.asyncio
async def test_sort_orders():
    newest = InMemorySearchBackend(
        SAMPLE_TAGS, SAMPLE_CREATORS, sort_order=CreatorSortOrder.NEWEST
    )
    page = await newest.search_creators_by_tags(["t1"], SearchMode.ALL, 0, 20)
    assert [creator.id for creator in page.creators] == ["c3", "c2", "c1"]

    by_name = InMemorySearchBackend(SAMPLE_TAGS, SAMPLE_CREATORS, sort_order=CreatorSortOrder.NAME)
    page = await by_name.search_creators_by_tags(["t2"], SearchMode.ALL, 0, 20)
    assert [creator.id for creator in page.creators] == ["c2", "c3", "c4"]


@pytest.mark.asyncio
async def test_tag_search_blank_queries_return_universe(catalog):
    page = await catalog.search_tags_by_name("", "", 0, 1000)
    assert page.tags == SAMPLE_TAGS
    assert page.total_count == len(SAMPLE_TAGS)


@pytest.mark.asyncio
async def test_tag_search_and_or_terms(catalog):
    page = await catalog.search_tags_by_name("game", "", 0, 20)
    assert [tag.id for tag in page.tags] == ["t1", "t3", "t4"]

    page = await catalog.search_tags_by_name("game", "board", 0, 20)
    assert [tag.id for tag in page.tags] == ["t4"]

    page = await catalog.search_tags_by_name("", "anime sing", 0, 20)
    assert [tag.id for tag in page.tags] == ["t2", "t6"]
