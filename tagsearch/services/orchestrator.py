"""Tag selection, debounced creator search and pagination state."""

from __future__ import annotations

import asyncio
from typing import Coroutine, Iterable, Sequence

from tagsearch.config import AppSettings, get_settings
from tagsearch.domain.models import Creator, PageCursor, SearchMode, SearchState, Tag
from tagsearch.logging import logger
from tagsearch.services.backends import SearchBackend
from tagsearch.services.exceptions import (
    CreatorSearchFailure,
    TagUniverseLoadFailure,
)
from tagsearch.services.history import SearchHistoryStore
from tagsearch.services.suggestions import TagSuggestionService
from tagsearch.utils.observable import Observable
from tagsearch.utils.scheduling import Debouncer, LoopScheduler, Scheduler


class SearchOrchestrator:
    """Owns the selection set and search state of one search screen.

    All state changes happen on the event loop between awaits. Every fresh
    search takes a new generation number; responses that come back for an
    older generation are dropped.
    """

    def __init__(
        self,
        backend: SearchBackend,
        history: SearchHistoryStore,
        *,
        settings: AppSettings | None = None,
        scheduler: Scheduler | None = None,
        suggestion_service: TagSuggestionService | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._backend = backend
        self._history = history
        self._suggestion_service = suggestion_service or TagSuggestionService(
            limit=self.settings.suggestions.limit
        )
        scheduler = scheduler or LoopScheduler()

        self.query_text: Observable[str] = Observable("", name="query_text")
        self.suggestions: Observable[tuple[Tag, ...]] = Observable((), name="suggestions")
        self.selected_tags: Observable[tuple[Tag, ...]] = Observable((), name="selected_tags")
        self.state: Observable[SearchState] = Observable(SearchState.initial(), name="state")
        self.search_history: Observable[tuple[str, ...]] = Observable((), name="search_history")
        self.is_loading: Observable[bool] = Observable(False, name="is_loading")
        self.has_more: Observable[bool] = Observable(False, name="has_more")
        self.total_count: Observable[int] = Observable(0, name="total_count")

        self.search_mode = SearchMode(self.settings.search.default_mode)
        self._cursor = PageCursor(page_size=self.settings.search.page_size)
        self._creators: tuple[Creator, ...] = ()
        self._all_tags: tuple[Tag, ...] = ()
        self._tags_loaded = False
        self._tag_load_task: asyncio.Task[bool] | None = None
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

        self._query_debouncer = Debouncer(
            self.settings.suggestions.debounce_seconds, self._on_query_settled, scheduler
        )
        self._search_debouncer = Debouncer(
            self.settings.search.debounce_seconds, self._on_selection_settled, scheduler
        )

    # -- read-only views -------------------------------------------------

    @property
    def cursor(self) -> PageCursor:
        return self._cursor

    @property
    def creators(self) -> tuple[Creator, ...]:
        return self._creators

    @property
    def all_tags(self) -> tuple[Tag, ...]:
        return self._all_tags

    @property
    def tags_loaded(self) -> bool:
        return self._tags_loaded

    @property
    def generation(self) -> int:
        return self._generation

    # -- lifecycle -------------------------------------------------------

    async def start(self) -> None:
        """Load search history and the tag universe."""

        await self.load_history()
        await self.load_tags()

    async def wait_idle(self) -> None:
        """Wait until every background task spawned so far has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self._query_debouncer.cancel()
        self._search_debouncer.cancel()
        await self.wait_idle()

    def flush_pending(self) -> None:
        """Run pending debounced work now instead of waiting for the window."""

        self._query_debouncer.flush()
        self._search_debouncer.flush()

    # -- tag universe ----------------------------------------------------

    async def load_tags(self) -> bool:
        if self._tags_loaded:
            return True
        return await self.ensure_tags_loaded()

    async def ensure_tags_loaded(self) -> bool:
        if self._tags_loaded:
            return True
        if self._tag_load_task is None or self._tag_load_task.done():
            self._tag_load_task = asyncio.get_running_loop().create_task(self._load_tag_universe())
        return await asyncio.shield(self._tag_load_task)

    async def reload_tags(self) -> bool:
        """Fetch the tag universe again.

        If the fetch fails, the previously loaded tags stay in ``all_tags``
        and ``tags_loaded`` stays false, so the next lazy load retries.
        """

        self._tags_loaded = False
        return await self.ensure_tags_loaded()

    async def _load_tag_universe(self) -> bool:
        try:
            tags = await self._fetch_tag_universe()
        except TagUniverseLoadFailure as exc:
            logger.warning("tag_universe_load_failed", error=str(exc))
            return False
        self._all_tags = tuple(tags)
        self._tags_loaded = True
        logger.info("tag_universe_loaded", tag_count=len(tags))
        return True

    async def _fetch_tag_universe(self) -> list[Tag]:
        try:
            page = await self._backend.search_tags_by_name(
                "", "", 0, self.settings.search.tag_universe_limit
            )
        except Exception as exc:
            raise TagUniverseLoadFailure(f"Could not load tags: {exc}") from exc
        return page.tags

    def tag_display_name(self, tag_id: str) -> str:
        for tag in self._all_tags:
            if tag.id == tag_id:
                return tag.display_name
        return tag_id

    def tags_for_ids(self, tag_ids: Iterable[str]) -> list[Tag]:
        by_id = {tag.id: tag for tag in reversed(self._all_tags)}
        return [by_id[tag_id] for tag_id in tag_ids if tag_id in by_id]

    # -- query text and suggestions --------------------------------------

    def set_query_text(self, text: str) -> None:
        self.query_text.set(text)
        self._query_debouncer.trigger()

    def _on_query_settled(self) -> None:
        if self._tags_loaded:
            self._update_suggestions()
            return
        self._spawn(self._load_then_suggest())

    async def _load_then_suggest(self) -> None:
        await self.ensure_tags_loaded()
        if not self._query_debouncer.pending:
            self._update_suggestions()

    def _update_suggestions(self) -> None:
        suggestions = self._suggestion_service.generate_suggestions(
            self.query_text.value, self._all_tags, self.selected_tags.value
        )
        self.suggestions.set(tuple(suggestions))

    def _clear_query(self) -> None:
        self._query_debouncer.cancel()
        self.query_text.set("")
        self.suggestions.set(())

    def autocomplete(self, tag: Tag) -> None:
        """Put ``tag``'s name into the query field and hide the suggestions."""

        self._query_debouncer.cancel()
        self.query_text.set(tag.display_name)
        self.suggestions.set(())

    # -- selection -------------------------------------------------------

    def _is_selected(self, tag: Tag) -> bool:
        return any(selected.id == tag.id for selected in self.selected_tags.value)

    def select_tag(self, tag: Tag) -> None:
        if self._is_selected(tag):
            return
        self._extend_selection([tag])
        self._clear_query()

    def add_typed_tag(self) -> bool:
        """Select the tag whose name matches the typed query, if any."""

        tag = self._suggestion_service.find_exact_match(self.query_text.value, self._all_tags)
        if tag is None or self._is_selected(tag):
            return False
        self.select_tag(tag)
        return True

    async def search_with_tag(self, tag: Tag) -> None:
        await self.ensure_tags_loaded()
        self.select_tag(tag)

    def remove_tag(self, tag: Tag) -> None:
        remaining = tuple(selected for selected in self.selected_tags.value if selected.id != tag.id)
        if len(remaining) == len(self.selected_tags.value):
            return
        self.selected_tags.set(remaining)
        if remaining:
            self._supersede_in_flight()
            self._search_debouncer.trigger()
        else:
            self._reset_results()

    def clear_all_tags(self) -> None:
        self.selected_tags.set(())
        self._reset_results()

    def clear_search(self) -> None:
        self._clear_query()
        self.clear_all_tags()

    def _extend_selection(self, tags: Sequence[Tag]) -> None:
        self.selected_tags.set(self.selected_tags.value + tuple(tags))
        self._supersede_in_flight()
        self._search_debouncer.trigger()

    def _supersede_in_flight(self) -> None:
        # Responses for the previous selection must not land on the new one.
        self._generation += 1
        self.is_loading.set(False)

    def _reset_results(self) -> None:
        self._search_debouncer.cancel()
        self._supersede_in_flight()
        self._creators = ()
        self._set_cursor(self._cursor.reset())
        self.state.set(SearchState.initial())

    def _on_selection_settled(self) -> None:
        self._spawn(self._perform_search())

    async def _perform_search(self) -> None:
        if not self.selected_tags.value:
            self._reset_results()
            return
        await self.search()

    # -- search ----------------------------------------------------------

    async def search(self) -> None:
        """Search creators carrying the selected tags, starting from page one."""

        if not self.selected_tags.value:
            self._reset_results()
            return

        self._generation += 1
        generation = self._generation
        selection = self.selected_tags.value
        page_size = self._cursor.page_size

        self.is_loading.set(True)
        self.state.set(SearchState.searching())
        self._set_cursor(self._cursor.model_copy(update={"offset": 0}))

        try:
            page = await self._backend.search_creators_by_tags(
                [tag.id for tag in selection], self.search_mode, 0, page_size
            )
        except CreatorSearchFailure as exc:
            if generation == self._generation:
                logger.warning("creator_search_failed", title=exc.title, error=exc.message)
                self._fail(exc.title, exc.message)
            return
        except Exception as exc:
            if generation == self._generation:
                logger.warning("creator_search_failed", error=str(exc))
                search_cfg = self.settings.search
                self._fail(search_cfg.error_title, search_cfg.error_message)
            return

        if generation != self._generation:
            logger.debug("stale_search_discarded", generation=generation, current=self._generation)
            return

        self._creators = tuple(page.creators)
        self._set_cursor(
            PageCursor(
                offset=0,
                page_size=page_size,
                has_more=page.has_more,
                total_count=page.total_count,
            )
        )
        self.is_loading.set(False)
        if not self._creators:
            self.state.set(SearchState.empty())
            return

        self.state.set(SearchState.loaded(self._creators))
        logger.info(
            "creator_search_completed",
            tag_count=len(selection),
            mode=self.search_mode.value,
            total_count=page.total_count,
        )
        await self._record_history(selection)

    def _fail(self, title: str, message: str) -> None:
        self.is_loading.set(False)
        self.state.set(SearchState.error(title, message))

    async def load_more(self) -> None:
        if (
            self.state.value.kind != "loaded_results"
            or not self._cursor.has_more
            or self.is_loading.value
        ):
            return

        generation = self._generation
        selection = self.selected_tags.value
        offset = self._cursor.next_offset
        self.is_loading.set(True)

        try:
            page = await self._backend.search_creators_by_tags(
                [tag.id for tag in selection], self.search_mode, offset, self._cursor.page_size
            )
        except Exception as exc:
            if generation == self._generation:
                logger.warning("load_more_failed", offset=offset, error=str(exc))
                self.is_loading.set(False)
            return

        if generation != self._generation:
            logger.debug("stale_page_discarded", generation=generation, offset=offset)
            return

        self._creators = self._creators + tuple(page.creators)
        self._set_cursor(
            self._cursor.model_copy(
                update={
                    "offset": offset,
                    "has_more": page.has_more,
                    "total_count": page.total_count,
                }
            )
        )
        self.state.set(SearchState.loaded(self._creators))
        self.is_loading.set(False)

    def _set_cursor(self, cursor: PageCursor) -> None:
        self._cursor = cursor
        self.has_more.set(cursor.has_more)
        self.total_count.set(cursor.total_count)

    # -- history ---------------------------------------------------------

    def history_key(self, tags: Iterable[Tag]) -> str:
        return self.settings.history.delimiter.join(tag.display_name for tag in tags)

    def parse_history_entry(self, entry: str) -> list[str]:
        names = (name.strip() for name in entry.split(self.settings.history.delimiter))
        return [name for name in names if name]

    async def add_tags_from_history_entry(self, entry: str) -> None:
        """Select every known tag named in ``entry`` with a single search."""

        await self.ensure_tags_loaded()
        by_name: dict[str, Tag] = {}
        for tag in self._all_tags:
            by_name.setdefault(tag.display_name, tag)

        selected_ids = {tag.id for tag in self.selected_tags.value}
        to_add: list[Tag] = []
        for name in self.parse_history_entry(entry):
            tag = by_name.get(name)
            if tag is None or tag.id in selected_ids:
                continue
            selected_ids.add(tag.id)
            to_add.append(tag)

        self._clear_query()
        if to_add:
            self._extend_selection(to_add)

    async def _record_history(self, selection: Sequence[Tag]) -> None:
        key = self.history_key(selection)
        if not key:
            return
        try:
            await self._history.append(key)
        except Exception as exc:
            logger.warning("history_write_failed", error=str(exc))
            return
        await self.load_history()

    async def load_history(self) -> None:
        try:
            entries = await self._history.list()
        except Exception as exc:
            logger.warning("history_read_failed", error=str(exc))
            return
        self.search_history.set(tuple(entries))

    async def delete_history_entry(self, entry: str) -> None:
        try:
            await self._history.remove(entry)
        except Exception as exc:
            logger.warning("history_write_failed", error=str(exc))
            return
        await self.load_history()

    async def clear_history(self) -> None:
        try:
            await self._history.clear()
        except Exception as exc:
            logger.warning("history_write_failed", error=str(exc))
            return
        await self.load_history()

    # -- background tasks ------------------------------------------------

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("background_task_failed", error=str(exc), exc_info=exc)


__all__ = ["SearchOrchestrator"]
