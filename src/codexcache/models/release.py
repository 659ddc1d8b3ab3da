from __future__ import annotations

from pydantic import BaseModel, field_validator


class GitHubRelease(BaseModel):
    """The part of a GitHub "latest release" payload we read."""

    tag_name: str  # e.g. "rust-v0.43.0"

    @field_validator("tag_name")
    @classmethod
    def validate_tag_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tag_name must not be empty")
        return v
