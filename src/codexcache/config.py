"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (CODEXCACHE__CACHE__FRESHNESS_MINUTES=1)
  2. codexcache.yaml        (searched in cwd, then ~/.config/codexcache/)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("codexcache")


def _find_config_file() -> str | None:
    """Return the path of the first codexcache.yaml found, or None."""
    candidates = [
        Path("codexcache.yaml"),
        Path.home() / ".config" / "codexcache" / "codexcache.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class UpstreamSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    releases_url: str = "https://api.github.com/repos/openai/codex/releases/latest"
    # {tag} is replaced with the resolved release tag
    instructions_url_template: str = (
        "https://raw.githubusercontent.com/openai/codex/{tag}/codex-rs/core/gpt_5_codex_prompt.md"
    )


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cache_dir: str = _DEFAULT_CACHE_DIR
    freshness_minutes: float = Field(default=15, gt=0)
    instructions_file: str = "codex-instructions.md"
    metadata_file: str = "codex-instructions-meta.json"

    @property
    def instructions_path(self) -> Path:
        return Path(self.cache_dir).expanduser() / self.instructions_file

    @property
    def metadata_path(self) -> Path:
        return Path(self.cache_dir).expanduser() / self.metadata_file


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = Field(default=10.0, gt=0)
    max_redirects: int = Field(default=3, ge=0)
    user_agent: str = "codexcache/0.1"


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: CODEXCACHE__FETCHER__TIMEOUT_SECONDS=5
        env_prefix="CODEXCACHE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    upstream: UpstreamSettings = UpstreamSettings()
    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
