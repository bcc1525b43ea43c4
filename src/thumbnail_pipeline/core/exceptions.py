"""Custom exceptions for the thumbnail pipeline."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Type


class ThumbnailPipelineError(Exception):
    """Base exception for all thumbnail pipeline errors."""


class StorageError(ThumbnailPipelineError):
    """Error raised for blob storage failures (download or upload)."""


class DocumentStoreError(ThumbnailPipelineError):
    """Error raised when a gallery record cannot be written."""


class ConfigurationError(ThumbnailPipelineError):
    """Error raised for invalid configuration options."""


class ImageProcessingError(ThumbnailPipelineError):
    """Error raised when an image cannot be decoded, resized or encoded."""


@contextmanager
def stage_errors(
    error_cls: Type[ThumbnailPipelineError], stage: str
) -> Iterator[None]:
    """Re-raise anything escaping a pipeline stage as ``error_cls``.

    Pipeline errors that are already typed pass through untouched.
    """
    try:
        yield
    except ThumbnailPipelineError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise error_cls(f"{stage} failed: {exc}") from exc
