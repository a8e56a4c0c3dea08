"""HTTP adapter for a remote tag/creator search API."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Sequence, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from tagsearch.config import BackendSettings
from tagsearch.domain.models import CreatorPage, SearchMode, TagPage
from tagsearch.logging import logger
from tagsearch.services.exceptions import BackendError, CreatorSearchFailure
from tagsearch.utils.retry import retry_async

PageT = TypeVar("PageT", bound=BaseModel)


class HttpSearchBackend:
    """Talks to ``GET /tags/search`` and ``POST /creators/search``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: BackendSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or BackendSettings()

    async def search_tags_by_name(
        self, and_query: str, or_query: str, offset: int, limit: int
    ) -> TagPage:
        params = {
            "and_query": and_query,
            "or_query": or_query,
            "offset": offset,
            "limit": limit,
        }

        async def _request() -> httpx.Response:
            response = await self._client.get(
                self._url("tags/search"),
                params=params,
                headers=self._headers(),
                timeout=self._settings.request_timeout_seconds,
            )
            response.raise_for_status()
            return response

        response = await self._send("tag_search_request", _request)
        return self._parse(response, TagPage)

    async def search_creators_by_tags(
        self, tag_ids: Sequence[str], mode: SearchMode, offset: int, limit: int
    ) -> CreatorPage:
        payload = {
            "tag_ids": list(tag_ids),
            "mode": SearchMode(mode).value,
            "offset": offset,
            "limit": limit,
        }

        async def _request() -> httpx.Response:
            response = await self._client.post(
                self._url("creators/search"),
                json=payload,
                headers=self._headers(),
                timeout=self._settings.request_timeout_seconds,
            )
            response.raise_for_status()
            return response

        response = await self._send("creator_search_request", _request)
        return self._parse(response, CreatorPage)

    async def _send(
        self, name: str, operation: Callable[[], Awaitable[httpx.Response]]
    ) -> httpx.Response:
        try:
            return await retry_async(
                operation,
                max_attempts=self._settings.retry_attempts,
                base_delay=self._settings.retry_base_delay_seconds,
                retry_on=(httpx.TransportError,),
                logger=logger,
                operation_name=name,
            )
        except httpx.HTTPStatusError as exc:
            failure = _failure_from_response(exc.response)
            if failure is not None:
                raise failure from exc
            detail = exc.response.text[:500]
            raise BackendError(
                f"Search API request failed ({exc.response.status_code}): {detail}"
            ) from exc
        except httpx.RequestError as exc:
            raise BackendError(f"Search API request failed: {exc}") from exc

    @staticmethod
    def _parse(response: httpx.Response, model: type[PageT]) -> PageT:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise BackendError(f"Malformed search API response: {exc}") from exc

    def _url(self, path: str) -> str:
        base_url = self._settings.base_url
        if not base_url:
            raise BackendError("Search API base URL is not configured.")
        return f"{str(base_url).rstrip('/')}/{path}"

    def _headers(self) -> dict[str, str]:
        token = self._settings.api_token
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token.get_secret_value()}"}


def _failure_from_response(response: httpx.Response) -> CreatorSearchFailure | None:
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    title = body.get("title")
    message = body.get("message")
    if isinstance(title, str) and isinstance(message, str):
        return CreatorSearchFailure(title, message)
    return None


__all__ = ["HttpSearchBackend"]
