"""End-to-end tests for get_codex_instructions() with on-disk state."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import respx

from codexcache import get_codex_instructions, load_bundled_instructions
from codexcache.fetcher import build_instructions_url

if TYPE_CHECKING:
    from codexcache.config import Settings


def _resource_url(settings: Settings, tag: str) -> str:
    return build_instructions_url(settings.upstream.instructions_url_template, tag)


class TestGetCodexInstructions:
    async def test_offline_without_cache_returns_bundled(self, env_settings: Settings) -> None:
        with respx.mock:
            respx.get(env_settings.upstream.releases_url).mock(
                side_effect=httpx.ConnectError("Network is unreachable")
            )
            content = await get_codex_instructions()

        assert content == load_bundled_instructions()
        assert not env_settings.cache.metadata_path.exists()
        assert not env_settings.cache.instructions_path.exists()

    async def test_first_fetch_populates_cache_files(self, env_settings: Settings) -> None:
        with respx.mock:
            respx.get(env_settings.upstream.releases_url).mock(
                return_value=httpx.Response(200, json={"tag_name": "rust-v0.43.0"})
            )
            respx.get(_resource_url(env_settings, "rust-v0.43.0")).mock(
                return_value=httpx.Response(200, text="# Codex v43", headers={"ETag": '"abc"'})
            )
            content = await get_codex_instructions()

        assert content == "# Codex v43"
        assert env_settings.cache.instructions_path.read_text(encoding="utf-8") == "# Codex v43"
        meta = json.loads(env_settings.cache.metadata_path.read_text(encoding="utf-8"))
        assert meta["etag"] == '"abc"'
        assert meta["tag"] == "rust-v0.43.0"
        assert meta["url"] == _resource_url(env_settings, "rust-v0.43.0")
        assert isinstance(meta["lastChecked"], int)

    async def test_second_call_within_window_stays_offline(self, env_settings: Settings) -> None:
        with respx.mock:
            index = respx.get(env_settings.upstream.releases_url).mock(
                return_value=httpx.Response(200, json={"tag_name": "rust-v0.43.0"})
            )
            respx.get(_resource_url(env_settings, "rust-v0.43.0")).mock(
                return_value=httpx.Response(200, text="# Codex v43", headers={"ETag": '"abc"'})
            )
            first = await get_codex_instructions()
            second = await get_codex_instructions()

        assert first == second == "# Codex v43"
        assert index.call_count == 1

    async def test_stale_cache_survives_outage(self, env_settings: Settings) -> None:
        cache = env_settings.cache
        cache.instructions_path.parent.mkdir(parents=True)
        cache.instructions_path.write_text("# old but usable", encoding="utf-8")
        cache.metadata_path.write_text(
            json.dumps({"etag": '"old"', "tag": "rust-v0.1.0", "lastChecked": 0, "url": "u"}),
            encoding="utf-8",
        )
        with respx.mock:
            respx.get(env_settings.upstream.releases_url).mock(return_value=httpx.Response(502))
            content = await get_codex_instructions()

        assert content == "# old but usable"

    async def test_corrupt_metadata_is_treated_as_never_cached(
        self, env_settings: Settings
    ) -> None:
        cache = env_settings.cache
        cache.metadata_path.parent.mkdir(parents=True)
        cache.metadata_path.write_text("{truncated", encoding="utf-8")
        cache.instructions_path.write_text("# old", encoding="utf-8")
        with respx.mock:
            respx.get(env_settings.upstream.releases_url).mock(
                return_value=httpx.Response(200, json={"tag_name": "v9"})
            )
            route = respx.get(_resource_url(env_settings, "v9")).mock(
                return_value=httpx.Response(200, text="# new", headers={"ETag": '"n"'})
            )
            content = await get_codex_instructions()

        assert content == "# new"
        assert "If-None-Match" not in route.calls.last.request.headers
        meta = json.loads(cache.metadata_path.read_text(encoding="utf-8"))
        assert meta["tag"] == "v9"
