"""Persisted state for the instructions cache: one metadata record, one artifact.

Read failures are logged with ``exc_info=True`` and reported as ``None``
(treated as "never cached" by the orchestrator). Write failures raise
``CacheIOError`` so the orchestrator can decide whether to keep going; the
content it already holds is returned either way.

Files are replaced atomically (write to a sibling temp file, then rename), so
concurrent readers see either the old or the new file, never a partial one.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog
from pydantic import ValidationError

from codexcache.errors import CacheIOError
from codexcache.models.cache import CacheMetadata

if TYPE_CHECKING:
    from codexcache.config import CacheSettings

log = structlog.get_logger()


class MetadataStore(Protocol):
    async def load(self) -> CacheMetadata | None: ...

    async def save(self, metadata: CacheMetadata) -> None: ...


class ArtifactStore(Protocol):
    async def load(self) -> str | None: ...

    async def save(self, content: str) -> None: ...


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_text(path: Path) -> str | None:
    if not path.exists():
        return None
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


# ----------------------------------------------------------------------
# File-backed stores
# ----------------------------------------------------------------------


class FileMetadataStore:
    """JSON metadata file implementing MetadataStore."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> CacheMetadata | None:
        """Read the metadata record. Returns ``None`` if absent or unreadable."""
        try:
            raw = await asyncio.to_thread(_read_text, self._path)
            if raw is None:
                return None
            return CacheMetadata.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError):
            log.warning("cache_read_error", key="metadata", path=str(self._path), exc_info=True)
            return None

    async def save(self, metadata: CacheMetadata) -> None:
        payload = metadata.model_dump_json(by_alias=True)
        try:
            await asyncio.to_thread(_atomic_write_text, self._path, payload)
        except OSError as exc:
            raise CacheIOError(f"Failed to write {self._path}: {exc}") from exc


class FileArtifactStore:
    """Plain text artifact file implementing ArtifactStore."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> str | None:
        """Read the artifact verbatim. Returns ``None`` if absent or unreadable."""
        try:
            return await asyncio.to_thread(_read_text, self._path)
        except (OSError, UnicodeDecodeError):
            log.warning("cache_read_error", key="artifact", path=str(self._path), exc_info=True)
            return None

    async def save(self, content: str) -> None:
        try:
            await asyncio.to_thread(_atomic_write_text, self._path, content)
        except OSError as exc:
            raise CacheIOError(f"Failed to write {self._path}: {exc}") from exc


# ----------------------------------------------------------------------
# In-memory stores
# ----------------------------------------------------------------------


class MemoryMetadataStore:
    """Process-local MetadataStore, for tests and embedding without disk state."""

    def __init__(self, metadata: CacheMetadata | None = None) -> None:
        self.metadata = metadata
        self.loads = 0
        self.saves = 0

    async def load(self) -> CacheMetadata | None:
        self.loads += 1
        return self.metadata

    async def save(self, metadata: CacheMetadata) -> None:
        self.metadata = metadata
        self.saves += 1


class MemoryArtifactStore:
    """Process-local ArtifactStore, for tests and embedding without disk state."""

    def __init__(self, content: str | None = None) -> None:
        self.content = content
        self.saves = 0

    async def load(self) -> str | None:
        return self.content

    async def save(self, content: str) -> None:
        self.content = content
        self.saves += 1


def build_file_stores(cache_settings: CacheSettings) -> tuple[FileMetadataStore, FileArtifactStore]:
    """Return the metadata/artifact file stores under the configured cache dir."""
    return (
        FileMetadataStore(cache_settings.metadata_path),
        FileArtifactStore(cache_settings.instructions_path),
    )
