"""Search history stores.

A store keeps query keys most-recent-first. Re-adding an existing key moves
it to the front; entries beyond ``max_entries`` are dropped from the tail.
Failures are reported as ``HistoryWriteFailure`` / ``HistoryReadFailure``.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from tagsearch.db.models import SearchHistoryEntry
from tagsearch.db.session import Database
from tagsearch.services.exceptions import HistoryReadFailure, HistoryWriteFailure

DEFAULT_MAX_ENTRIES = 20


class SearchHistoryStore(Protocol):
    async def append(self, query: str) -> None: ...

    async def list(self) -> list[str]: ...

    async def clear(self) -> None: ...

    async def remove(self, query: str) -> None: ...


class InMemorySearchHistoryStore:
    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: list[str] = []

    async def append(self, query: str) -> None:
        query = query.strip()
        if not query:
            return
        if query in self._entries:
            self._entries.remove(query)
        self._entries.insert(0, query)
        del self._entries[self.max_entries :]

    async def list(self) -> list[str]:
        return self._entries.copy()

    async def clear(self) -> None:
        self._entries.clear()

    async def remove(self, query: str) -> None:
        if query in self._entries:
            self._entries.remove(query)


class SqlSearchHistoryStore:
    """History persisted in the ``search_history`` table."""

    def __init__(self, database: Database, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.database = database
        self.max_entries = max_entries

    async def append(self, query: str) -> None:
        query = query.strip()
        if not query:
            return
        try:
            async with self.database.session() as session:
                result = await session.execute(select(func.max(SearchHistoryEntry.position)))
                top = result.scalar() or 0

                result = await session.execute(
                    select(SearchHistoryEntry).where(SearchHistoryEntry.query == query)
                )
                entry = result.scalar_one_or_none()
                if entry is None:
                    session.add(SearchHistoryEntry(query=query, position=top + 1))
                else:
                    entry.position = top + 1
                await session.flush()

                await self._trim(session)
                await session.commit()
        except SQLAlchemyError as exc:
            raise HistoryWriteFailure(f"Could not save search history: {exc}") from exc

    async def list(self) -> list[str]:
        stmt = (
            select(SearchHistoryEntry.query)
            .order_by(SearchHistoryEntry.position.desc())
            .limit(self.max_entries)
        )
        try:
            async with self.database.session() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise HistoryReadFailure(f"Could not read search history: {exc}") from exc

    async def clear(self) -> None:
        await self._delete(delete(SearchHistoryEntry))

    async def remove(self, query: str) -> None:
        await self._delete(delete(SearchHistoryEntry).where(SearchHistoryEntry.query == query))

    async def _delete(self, stmt) -> None:
        try:
            async with self.database.session() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise HistoryWriteFailure(f"Could not update search history: {exc}") from exc

    async def _trim(self, session) -> None:
        stale = (
            select(SearchHistoryEntry.id)
            .order_by(SearchHistoryEntry.position.desc())
            .offset(self.max_entries)
        )
        result = await session.execute(stale)
        stale_ids = list(result.scalars().all())
        if stale_ids:
            await session.execute(
                delete(SearchHistoryEntry).where(SearchHistoryEntry.id.in_(stale_ids))
            )


__all__ = [
    "DEFAULT_MAX_ENTRIES",
    "InMemorySearchHistoryStore",
    "SearchHistoryStore",
    "SqlSearchHistoryStore",
]
