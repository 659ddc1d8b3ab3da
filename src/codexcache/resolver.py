"""Latest-release lookup against the upstream release index.

No caching here: every call is a live request. The orchestrator's freshness
window is what keeps the index from being hit on every call.
"""

from __future__ import annotations

import httpx
from pydantic import ValidationError

from codexcache.config import UpstreamSettings
from codexcache.errors import MalformedResponse, UpstreamUnavailable
from codexcache.models.release import GitHubRelease


class VersionResolver:
    def __init__(self, client: httpx.AsyncClient, settings: UpstreamSettings | None = None) -> None:
        self._client = client
        self._settings = settings or UpstreamSettings()

    async def resolve_latest_version(self) -> str:
        """Return the tag of the latest upstream release.

        Raises:
            UpstreamUnavailable: transport error, timeout or non-2xx status.
            MalformedResponse: body is not JSON or carries no usable ``tag_name``.
        """
        url = self._settings.releases_url
        try:
            response = await self._client.get(
                url, headers={"Accept": "application/vnd.github+json"}
            )
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"Release index unreachable: {url}: {exc}") from exc

        if not response.is_success:
            raise UpstreamUnavailable(
                f"Release index returned HTTP {response.status_code}: {url}"
            )

        try:
            release = GitHubRelease.model_validate_json(response.content)
        except ValidationError as exc:
            raise MalformedResponse(f"Release index payload has no usable tag: {url}") from exc
        return release.tag_name
