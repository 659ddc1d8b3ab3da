"""Error taxonomy for the instructions cache.

None of these escape ``get_codex_instructions()``: the orchestrator turns every
one of them into a fallback step and logs which tier served the content.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    CACHE_IO_ERROR = "CACHE_IO_ERROR"


class CodexCacheError(Exception):
    """Base error carrying a machine-readable code and a recoverability hint."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable


class UpstreamUnavailable(CodexCacheError):
    """Network, DNS, timeout or non-success status from an upstream endpoint."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.UPSTREAM_UNAVAILABLE, message, recoverable=True)


class MalformedResponse(CodexCacheError):
    """The release index answered, but not with a usable version tag."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.MALFORMED_RESPONSE, message, recoverable=False)


class CacheIOError(CodexCacheError):
    """Local persisted-state write failure."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.CACHE_IO_ERROR, message, recoverable=True)
