"""HTTP client construction and the conditional (ETag) instructions fetch."""

from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog

from codexcache.config import FetcherSettings
from codexcache.models.fetch import Failure, FetchOutcome, Fresh, NotModified

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Shared client for the release index and the instructions resource.

    Every request is bounded by ``settings.timeout_seconds``; a timeout surfaces
    as ``httpx.TimeoutException`` and is handled like any other transport error.
    """
    settings = settings or FetcherSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=True,
        max_redirects=settings.max_redirects,
        headers={"User-Agent": settings.user_agent},
    )


def build_instructions_url(template: str, tag: str) -> str:
    """Render the version-qualified resource URL for a release tag."""
    return template.format(tag=quote(tag, safe=""))


class RevalidationClient:
    """Conditional GET of the instructions resource.

    Never raises: every result, including transport errors, is a FetchOutcome.
    Persistence is left to the caller.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, url: str, etag: str | None) -> FetchOutcome:
        headers = {"If-None-Match": etag} if etag else {}
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            log.warning("instructions_request_error", url=url, error=str(exc))
            return Failure(error=str(exc) or type(exc).__name__)

        if response.status_code == 304:
            if etag is None:
                # Nothing was asked to be revalidated
                log.warning("unexpected_not_modified", url=url)
                return Failure(status=304)
            return NotModified()

        if response.is_success:
            return Fresh(content=response.text, etag=response.headers.get("etag"))

        log.warning("instructions_request_failed", url=url, status_code=response.status_code)
        return Failure(status=response.status_code)
