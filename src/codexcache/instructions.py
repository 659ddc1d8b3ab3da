"""Codex instructions retrieval: fresh cache, release-pinned revalidation, fallbacks.

``get_content()`` always resolves to some text. The tiers, first that answers wins:

  1. cached copy younger than the freshness window (no network)
  2. release index + conditional fetch (304 serves the cache, 200 replaces it)
  3. cached copy regardless of age
  4. the document bundled with this package

Which tier served the call is only visible in the logs.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from importlib import resources

import structlog

from codexcache.config import CacheSettings, Settings, UpstreamSettings
from codexcache.errors import CacheIOError, CodexCacheError
from codexcache.fetcher import RevalidationClient, build_http_client, build_instructions_url
from codexcache.models.cache import CacheMetadata
from codexcache.models.fetch import Failure, FetchOutcome, Fresh, NotModified
from codexcache.resolver import VersionResolver
from codexcache.stores import ArtifactStore, MetadataStore, build_file_stores

log = structlog.get_logger()

_BUNDLED_PACKAGE = "codexcache.bundled"
_BUNDLED_FILE = "codex-instructions.md"

# A strategy gets the metadata read at the start of the call and returns the content
# it can serve, or None to hand over to the next one.
FallbackStrategy = Callable[[CacheMetadata | None], Awaitable[str | None]]


def load_bundled_instructions() -> str:
    """Read the instructions document shipped inside the package."""
    return resources.files(_BUNDLED_PACKAGE).joinpath(_BUNDLED_FILE).read_text(encoding="utf-8")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InstructionsCache:
    """Decision engine tying the stores, the resolver and the fetcher together."""

    def __init__(
        self,
        resolver: VersionResolver,
        fetcher: RevalidationClient,
        metadata_store: MetadataStore,
        artifact_store: ArtifactStore,
        cache_settings: CacheSettings | None = None,
        upstream_settings: UpstreamSettings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._resolver = resolver
        self._fetcher = fetcher
        self._metadata_store = metadata_store
        self._artifact_store = artifact_store
        self._cache_settings = cache_settings or CacheSettings()
        self._upstream_settings = upstream_settings or UpstreamSettings()
        self._clock = clock

    @property
    def freshness_window(self) -> timedelta:
        return timedelta(minutes=self._cache_settings.freshness_minutes)

    async def get_content(self) -> str:
        metadata = await self._metadata_store.load()
        strategies: list[FallbackStrategy] = [
            self._serve_fresh_cache,
            self._serve_from_upstream,
            self._serve_stale,
        ]
        for strategy in strategies:
            content = await strategy(metadata)
            if content is not None:
                return content
        return self._serve_bundled()

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    async def _serve_fresh_cache(self, metadata: CacheMetadata | None) -> str | None:
        if metadata is None or not self._is_fresh(metadata):
            return None
        content = await self._artifact_store.load()
        if content is not None:
            log.debug("instructions_cache_fresh", tag=metadata.version_tag)
        return content

    async def _serve_from_upstream(self, metadata: CacheMetadata | None) -> str | None:
        try:
            return await self._revalidate(metadata)
        except CodexCacheError as exc:
            log.warning(
                "release_index_failed",
                code=exc.code,
                recoverable=exc.recoverable,
                error=exc.message,
            )
            return None

    async def _serve_stale(self, metadata: CacheMetadata | None) -> str | None:
        content = await self._artifact_store.load()
        if content is not None:
            log.warning(
                "instructions_served_stale",
                tag=metadata.version_tag if metadata is not None else None,
            )
        return content

    def _serve_bundled(self) -> str:
        log.warning("instructions_served_bundled")
        return load_bundled_instructions()

    # ------------------------------------------------------------------
    # Revalidation
    # ------------------------------------------------------------------

    def _is_fresh(self, metadata: CacheMetadata) -> bool:
        age = self._clock() - metadata.last_checked
        return timedelta(0) <= age < self.freshness_window

    async def _revalidate(self, metadata: CacheMetadata | None) -> str | None:
        """Network tier. Returns None on a failed fetch; resolver errors propagate."""
        tag = await self._resolver.resolve_latest_version()
        url = build_instructions_url(self._upstream_settings.instructions_url_template, tag)

        # A validator issued for another release says nothing about this one
        etag = metadata.etag if metadata is not None and metadata.version_tag == tag else None

        outcome = await self._fetcher.fetch(url, etag)
        if isinstance(outcome, NotModified):
            content = await self._artifact_store.load()
            if content is not None:
                log.info("instructions_not_modified", tag=tag)
                return content
            log.warning("instructions_not_modified_without_artifact", tag=tag)
            outcome = await self._fetcher.fetch(url, None)

        return await self._handle_outcome(outcome, tag, url)

    async def _handle_outcome(self, outcome: FetchOutcome, tag: str, url: str) -> str | None:
        if isinstance(outcome, Fresh):
            await self._persist(outcome, tag, url)
            log.info("instructions_fetched", tag=tag, etag=outcome.etag)
            return outcome.content

        # A 304 here still leaves nothing to serve
        failure = outcome if isinstance(outcome, Failure) else Failure(status=304)
        log.warning(
            "instructions_fetch_failed",
            url=url,
            status_code=failure.status,
            error=failure.error,
        )
        return None

    async def _persist(self, outcome: Fresh, tag: str, url: str) -> None:
        """Write artifact then metadata; metadata is skipped if the artifact write fails."""
        metadata = CacheMetadata(
            etag=outcome.etag,
            version_tag=tag,
            last_checked=self._clock(),
            source_url=url,
        )
        try:
            await self._artifact_store.save(outcome.content)
            await self._metadata_store.save(metadata)
        except CacheIOError as exc:
            log.warning("cache_write_error", error=exc.message)


async def get_codex_instructions(settings: Settings | None = None) -> str:
    """Return the Codex instructions text. Never raises for network or cache errors."""
    settings = settings or Settings()
    metadata_store, artifact_store = build_file_stores(settings.cache)
    async with build_http_client(settings.fetcher) as client:
        cache = InstructionsCache(
            resolver=VersionResolver(client, settings.upstream),
            fetcher=RevalidationClient(client),
            metadata_store=metadata_store,
            artifact_store=artifact_store,
            cache_settings=settings.cache,
            upstream_settings=settings.upstream,
        )
        return await cache.get_content()
