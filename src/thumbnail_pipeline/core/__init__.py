"""Core utilities and shared components for the thumbnail pipeline."""

from .config import PipelineSettings, load_settings
from .exceptions import (
    ConfigurationError,
    DocumentStoreError,
    ImageProcessingError,
    StorageError,
    ThumbnailPipelineError,
)
from .image_utils import (
    calculate_thumbnail_key,
    calculate_thumbnail_size,
    resize_to_width,
)
from .logging_config import get_logger, setup_logger
from .models import (
    FilterDecision,
    GalleryRecord,
    PipelineResult,
    PipelineStage,
    PipelineStatus,
    StagedFile,
    ThumbnailArtifact,
    UploadEvent,
)

__all__ = [
    "PipelineSettings",
    "load_settings",
    "UploadEvent",
    "FilterDecision",
    "StagedFile",
    "ThumbnailArtifact",
    "GalleryRecord",
    "PipelineResult",
    "PipelineStage",
    "PipelineStatus",
    "calculate_thumbnail_key",
    "calculate_thumbnail_size",
    "resize_to_width",
    "setup_logger",
    "get_logger",
    "ThumbnailPipelineError",
    "StorageError",
    "DocumentStoreError",
    "ImageProcessingError",
    "ConfigurationError",
]
