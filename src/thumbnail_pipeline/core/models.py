"""Shared data models for the thumbnail pipeline."""

import os
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

THUMBNAIL_CONTENT_TYPE = "image/jpeg"


class PipelineStage(str, Enum):
    """Stages an invocation moves through."""

    FILTERING = "filtering"
    STAGING = "staging"
    TRANSFORMING = "transforming"
    PUBLISHING = "publishing"
    CLEANING_UP = "cleaning_up"
    DONE = "done"


class PipelineStatus(str, Enum):
    """Final outcome of an invocation."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class UploadEvent(BaseModel):
    """An object-storage finalize notification."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    bucket: Optional[str] = None
    name: Optional[str] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")
    size: Optional[int] = None

    @field_validator("size", mode="before")
    @classmethod
    def _normalize_size(cls, value: Any) -> Optional[int]:
        # Notifications carry the size as a numeric string; zero means unknown.
        if value in (None, "", 0, "0"):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class FilterDecision(BaseModel):
    """Outcome of evaluating an UploadEvent against the filter rules."""

    accepted: bool
    reason: str = ""
    bucket: str = ""
    key: str = ""
    content_type: Optional[str] = None
    size: Optional[int] = None


class StagedFile(BaseModel):
    """A local, invocation-owned copy of a file."""

    path: str
    owner_pid: int = Field(default_factory=os.getpid)

    @property
    def exists(self) -> bool:
        return os.path.exists(self.path)


class ThumbnailArtifact(BaseModel):
    """A resized JPEG ready to be uploaded."""

    key: str
    staged: StagedFile
    width: int
    height: int
    quality: int = 80
    content_type: str = THUMBNAIL_CONTENT_TYPE


class GalleryRecord(BaseModel):
    """Metadata document linking a source image to its thumbnail."""

    model_config = ConfigDict(populate_by_name=True)

    original_path: str = Field(alias="originalPath")
    thumbnail_path: str = Field(alias="thumbnailPath")
    content_type: str = Field(default=THUMBNAIL_CONTENT_TYPE, alias="contentType")
    size: Optional[int] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    def to_document(self) -> Dict[str, Any]:
        """Serialize with the stored camelCase field names.

        ``createdAt`` is left out; the document store assigns it on insert.
        """
        return self.model_dump(by_alias=True, exclude={"created_at"})


class PipelineResult(BaseModel):
    """Result of a single pipeline invocation.

    ``stage`` is ``done`` once ``handle`` returns; ``failed_stage`` names the
    stage that raised when the status is ``failed``.
    """

    source_key: str = ""
    thumbnail_key: str = ""
    status: PipelineStatus = PipelineStatus.FAILED
    stage: PipelineStage = PipelineStage.FILTERING
    failed_stage: Optional[PipelineStage] = None
    reason: str = ""
    error: str = ""
    record_id: Optional[str] = None
    processing_time: float = 0.0

    @property
    def success(self) -> bool:
        return self.status == PipelineStatus.SUCCEEDED
