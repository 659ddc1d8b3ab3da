"""Outcomes of a conditional fetch against the version-qualified resource."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NotModified:
    """Upstream confirmed the stored validator is still current (HTTP 304)."""


@dataclass(frozen=True)
class Fresh:
    content: str
    etag: str | None = None


@dataclass(frozen=True)
class Failure:
    status: int | None = None  # HTTP status, when a response arrived at all
    error: str | None = None  # Transport error description otherwise


FetchOutcome = NotModified | Fresh | Failure
