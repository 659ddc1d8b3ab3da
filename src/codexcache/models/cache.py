from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class CacheMetadata(BaseModel):
    """Revalidation record stored beside the cached instructions.

    JSON keys follow the ``codex-instructions-meta.json`` layout
    (``etag``, ``tag``, ``lastChecked``, ``url``).
    """

    model_config = ConfigDict(populate_by_name=True)

    etag: str | None = None
    version_tag: str = Field(alias="tag")
    last_checked: datetime = Field(alias="lastChecked")  # Last contact with the release index
    source_url: str = Field(alias="url")

    @field_validator("last_checked", mode="before")
    @classmethod
    def parse_last_checked(cls, v: object) -> object:
        # Epoch milliseconds on disk
        if isinstance(v, int | float) and not isinstance(v, bool):
            try:
                return datetime.fromtimestamp(v / 1000, tz=UTC)
            except (OverflowError, OSError, ValueError) as exc:
                raise ValueError(f"lastChecked out of range: {v!r}") from exc
        return v

    @field_validator("last_checked")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @field_serializer("last_checked")
    def serialize_last_checked(self, v: datetime) -> int:
        return int(v.timestamp() * 1000)
