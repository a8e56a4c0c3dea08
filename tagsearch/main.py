"""Command-line entrypoint running one tag search end to end."""

from __future__ import annotations

import argparse
import asyncio

import httpx

from tagsearch.config import AppSettings, get_settings
from tagsearch.db.session import Database
from tagsearch.domain.models import SearchMode, SearchState
from tagsearch.logging import configure_logging, logger
from tagsearch.services.backends import SearchBackend
from tagsearch.services.history import SearchHistoryStore, SqlSearchHistoryStore
from tagsearch.services.http_backend import HttpSearchBackend
from tagsearch.services.orchestrator import SearchOrchestrator
from tagsearch.utils.scheduling import Scheduler


def build_orchestrator(
    settings: AppSettings | None = None,
    *,
    backend: SearchBackend | None = None,
    history: SearchHistoryStore | None = None,
    scheduler: Scheduler | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> SearchOrchestrator:
    """Wire an orchestrator from settings, filling in the default adapters."""

    settings = settings or get_settings()
    if backend is None:
        if http_client is None:
            raise ValueError("An http_client is required when no backend is given.")
        backend = HttpSearchBackend(http_client, settings=settings.backend)
    if history is None:
        history = SqlSearchHistoryStore(
            Database(settings=settings), max_entries=settings.history.max_entries
        )
    return SearchOrchestrator(backend, history, settings=settings, scheduler=scheduler)


async def run_query(orchestrator: SearchOrchestrator, entry: str) -> SearchState:
    """Select the tags named in ``entry`` and return the settled search state."""

    await orchestrator.start()
    await orchestrator.add_tags_from_history_entry(entry)
    orchestrator.flush_pending()
    await orchestrator.wait_idle()
    return orchestrator.state.value


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search creators by tag names.")
    parser.add_argument("query", help="Tag names joined by the history delimiter, e.g. 'Game,Anime'.")
    parser.add_argument("--mode", choices=[mode.value for mode in SearchMode], default=None)
    parser.add_argument("--pages", type=int, default=1, help="Number of result pages to fetch.")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> SearchState:
    args = _parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    database = Database(settings=settings)
    await database.create_schema()
    history = SqlSearchHistoryStore(database, max_entries=settings.history.max_entries)

    try:
        async with httpx.AsyncClient() as client:
            orchestrator = build_orchestrator(settings, history=history, http_client=client)
            if args.mode:
                orchestrator.search_mode = SearchMode(args.mode)
            try:
                await run_query(orchestrator, args.query)
                for _ in range(max(args.pages, 1) - 1):
                    if not orchestrator.has_more.value:
                        break
                    await orchestrator.load_more()
                state = orchestrator.state.value
            finally:
                await orchestrator.close()
    finally:
        await database.dispose()

    logger.info(
        "search_finished",
        state=state.kind,
        creators=[creator.id for creator in state.creators],
        total_count=orchestrator.total_count.value,
        title=state.title,
        message=state.message,
    )
    return state


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
