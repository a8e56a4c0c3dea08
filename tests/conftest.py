"""Shared pytest fixtures: sample catalog, fakes and an in-memory database."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tagsearch.config import AppSettings, HistorySettings, SearchSettings, SuggestionSettings
from tagsearch.db.base import Base
from tagsearch.domain.models import Creator, CreatorPage, SearchMode, Tag
from tagsearch.services.backends import InMemorySearchBackend
from tagsearch.services.history import InMemorySearchHistoryStore
from tagsearch.services.orchestrator import SearchOrchestrator
from tagsearch.utils.scheduling import ManualScheduler

GAME = Tag(id="t1", display_name="Game")
ANIME = Tag(id="t2", display_name="Anime")
GAMER = Tag(id="t3", display_name="Gamer")
BOARD_GAME = Tag(id="t4", display_name="Board Game")
JIKKYOU = Tag(id="t5", display_name="ゲーム実況")
SINGING = Tag(id="t6", display_name="Singing")

SAMPLE_TAGS = [GAME, ANIME, GAMER, BOARD_GAME, JIKKYOU, SINGING]


def _creator(creator_id: str, tags: tuple[str, ...], views: int, day: int) -> Creator:
    return Creator(
        id=creator_id,
        name=f"Creator {creator_id}",
        related_tags=tags,
        view_count=views,
        created_at=datetime(2025, 6, day, tzinfo=timezone.utc),
    )


SAMPLE_CREATORS = [
    _creator("c1", ("t1", "t5"), 5000, 1),
    _creator("c2", ("t1", "t2", "t6"), 9000, 2),
    _creator("c3", ("t1", "t2"), 11000, 3),
    _creator("c4", ("t2",), 3000, 4),
    _creator("c5", ("t6",), 7000, 5),
]


class RecordingBackend(InMemorySearchBackend):
    """In-memory backend that records calls and can be told to fail."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.tag_calls: list[tuple[str, str, int, int]] = []
        self.creator_calls: list[tuple[list[str], SearchMode, int, int]] = []
        self.tag_failure: Exception | None = None
        self.creator_failure: Exception | None = None

    async def search_tags_by_name(self, and_query, or_query, offset, limit):
        self.tag_calls.append((and_query, or_query, offset, limit))
        if self.tag_failure is not None:
            raise self.tag_failure
        return await super().search_tags_by_name(and_query, or_query, offset, limit)

    async def search_creators_by_tags(self, tag_ids, mode, offset, limit):
        self.creator_calls.append((list(tag_ids), SearchMode(mode), offset, limit))
        if self.creator_failure is not None:
            raise self.creator_failure
        return await super().search_creators_by_tags(tag_ids, mode, offset, limit)


class GatedBackend(RecordingBackend):
    """Creator searches block until the test resolves the matching future."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.gates: list[asyncio.Future] = []

    async def search_creators_by_tags(self, tag_ids, mode, offset, limit):
        self.creator_calls.append((list(tag_ids), SearchMode(mode), offset, limit))
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        return await gate


class FailingHistoryStore(InMemorySearchHistoryStore):
    def __init__(self, *, read_error=None, write_error=None) -> None:
        super().__init__()
        self.read_error = read_error
        self.write_error = write_error

    async def append(self, query: str) -> None:
        if self.write_error is not None:
            raise self.write_error
        await super().append(query)

    async def list(self) -> list[str]:
        if self.read_error is not None:
            raise self.read_error
        return await super().list()

    async def remove(self, query: str) -> None:
        if self.write_error is not None:
            raise self.write_error
        await super().remove(query)

    async def clear(self) -> None:
        if self.write_error is not None:
            raise self.write_error
        await super().clear()


def page_of(*creator_ids: str, has_more: bool = False, total: int | None = None) -> CreatorPage:
    creators = [Creator(id=creator_id) for creator_id in creator_ids]
    return CreatorPage(
        creators=creators,
        has_more=has_more,
        total_count=len(creators) if total is None else total,
    )


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        suggestions=SuggestionSettings(limit=10, debounce_seconds=0.1),
        search=SearchSettings(page_size=20, debounce_seconds=0.5),
        history=HistorySettings(delimiter=",", max_entries=20),
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend(SAMPLE_TAGS, SAMPLE_CREATORS)


@pytest.fixture
def history() -> InMemorySearchHistoryStore:
    return InMemorySearchHistoryStore()


@pytest.fixture
def orchestrator(backend, history, settings, scheduler) -> SearchOrchestrator:
    return SearchOrchestrator(backend, history, settings=settings, scheduler=scheduler)


class _AsyncSessionWrapper:
    def __init__(self, sync_session) -> None:
        self._sync = sync_session

    async def execute(self, *args, **kwargs):
        return self._sync.execute(*args, **kwargs)

    async def get(self, *args, **kwargs):
        return self._sync.get(*args, **kwargs)

    def add(self, obj) -> None:
        self._sync.add(obj)

    async def flush(self) -> None:
        self._sync.flush()

    async def commit(self) -> None:
        self._sync.commit()

    async def rollback(self) -> None:
        self._sync.rollback()

    async def close(self) -> None:
        self._sync.close()


class DummyDatabase:
    """Stands in for ``Database`` by handing out one shared session."""

    def __init__(self, session) -> None:
        self._session = session

    @asynccontextmanager
    async def session(self):
        try:
            yield self._session
        except Exception:
            await self._session.rollback()
            raise


@pytest_asyncio.fixture
async def session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sync_session = SessionLocal()
    try:
        yield _AsyncSessionWrapper(sync_session)
    finally:
        sync_session.close()
        engine.dispose()


@pytest.fixture
def database(session) -> DummyDatabase:
    return DummyDatabase(session)
