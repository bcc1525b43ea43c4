"""Environment-driven settings for the thumbnail pipeline."""

from typing import Any, Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class PipelineSettings(BaseSettings):
    """Settings read from ``THUMBNAIL_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="THUMBNAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Filter ──────────────────────────────────────────────────────────────
    # Empty means every upload is eligible; "gallery/" scopes to that folder.
    source_prefix: str = ""
    thumbnail_prefix: str = "thumbnails/"

    # ── Transform ───────────────────────────────────────────────────────────
    thumbnail_width: int = 320
    jpeg_quality: int = 80

    # ── Publish ─────────────────────────────────────────────────────────────
    gallery_collection: str = "gallery"
    table_prefix: str = ""

    # ── AWS ─────────────────────────────────────────────────────────────────
    aws_region: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    dynamodb_endpoint_url: Optional[str] = None

    # ── Runtime ─────────────────────────────────────────────────────────────
    temp_dir: Optional[str] = None
    debug: bool = False

    @field_validator("thumbnail_prefix")
    @classmethod
    def _require_thumbnail_prefix(cls, value: str) -> str:
        if not value:
            raise ValueError("thumbnail_prefix must not be empty")
        return value if value.endswith("/") else value + "/"

    @field_validator("thumbnail_width")
    @classmethod
    def _positive_width(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("thumbnail_width must be positive")
        return value

    @field_validator("jpeg_quality")
    @classmethod
    def _quality_range(cls, value: int) -> int:
        if not 1 <= value <= 95:
            raise ValueError("jpeg_quality must be between 1 and 95")
        return value

    @field_validator("gallery_collection")
    @classmethod
    def _require_collection(cls, value: str) -> str:
        if not value:
            raise ValueError("gallery_collection must not be empty")
        return value


def load_settings(**overrides: Any) -> PipelineSettings:
    """Build settings from the environment, applying explicit overrides.

    Raises:
        ConfigurationError: If any value fails validation.
    """
    try:
        return PipelineSettings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid pipeline settings: {exc}") from exc
