"""Integration fixtures: configuration supplied through the environment.

``get_codex_instructions()`` and the CLI build their own Settings, so the test
endpoints and the tmp cache dir are injected via CODEXCACHE__* variables.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from codexcache.config import Settings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def env_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Settings:
    monkeypatch.setenv(
        "CODEXCACHE__UPSTREAM__RELEASES_URL",
        "https://api.example.test/repos/openai/codex/releases/latest",
    )
    monkeypatch.setenv(
        "CODEXCACHE__UPSTREAM__INSTRUCTIONS_URL_TEMPLATE",
        "https://raw.example.test/openai/codex/{tag}/prompt.md",
    )
    monkeypatch.setenv("CODEXCACHE__CACHE__CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("CODEXCACHE__LOGGING__FORMAT", "text")
    return Settings()
