from __future__ import annotations

from codexcache.models.cache import CacheMetadata
from codexcache.models.fetch import Failure, FetchOutcome, Fresh, NotModified
from codexcache.models.release import GitHubRelease

__all__ = [
    # cache
    "CacheMetadata",
    # release index
    "GitHubRelease",
    # revalidation
    "FetchOutcome",
    "NotModified",
    "Fresh",
    "Failure",
]
