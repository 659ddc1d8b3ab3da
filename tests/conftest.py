"""Shared fixtures: upstream endpoints on a test domain and a cache dir under tmp_path."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import structlog

from codexcache.config import CacheSettings, Settings, UpstreamSettings

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_logging() so no test inherits another test's stderr stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def upstream_settings() -> UpstreamSettings:
    return UpstreamSettings(
        releases_url="https://api.example.test/repos/openai/codex/releases/latest",
        instructions_url_template="https://raw.example.test/openai/codex/{tag}/prompt.md",
    )


@pytest.fixture()
def cache_settings(tmp_path: Path) -> CacheSettings:
    return CacheSettings(cache_dir=str(tmp_path / "cache"))


@pytest.fixture()
def settings(upstream_settings: UpstreamSettings, cache_settings: CacheSettings) -> Settings:
    return Settings(upstream=upstream_settings, cache=cache_settings)
