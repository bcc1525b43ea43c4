# src/thumbnail_pipeline/core/error_handling.py

import functools
import logging

from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError

from .exceptions import ImageProcessingError, StorageError, ThumbnailPipelineError


def with_error_handling(func):
    """
    A decorator to wrap collaborator calls with standardized error handling.

    botocore failures become StorageError and Pillow decode failures become
    ImageProcessingError. Anything else is logged and re-raised unchanged.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except ThumbnailPipelineError:
            raise
        except Exception as e:
            logger.error(
                f"Error in '{func.__name__}': {e}",
                exc_info=True
            )
            if isinstance(e, (ClientError, BotoCoreError)):
                raise StorageError(f"Storage operation failed in {func.__name__}: {e}") from e
            if isinstance(e, UnidentifiedImageError):
                raise ImageProcessingError(f"Failed to identify image in {func.__name__}: {e}") from e
            if isinstance(e, (Image.DecompressionBombError, MemoryError)):
                raise ImageProcessingError(f"Image too large in {func.__name__}: {e}") from e
            raise
    return wrapper


class CleanupContextManager:
    """
    Context manager collecting best-effort release failures.

    Failures reported through ``add_error`` are logged as warnings when the
    block exits and are never raised. Exceptions raised inside the block
    itself still propagate.
    """
    def __init__(self, operation_name="Cleanup"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self):
        self.logger.debug(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.warning(
                    f"  Error {i+1}/{len(self.errors)} for '{error_detail['item']}': {error_detail['error']}"
                )
        elif exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.debug(f"{self.operation_name} completed successfully.")
        return False

    def add_error(self, error_message, item_identifier="Unknown item"):
        """
        Report a release failure for a specific item.

        Args:
            error_message: The error message or exception.
            item_identifier: A string identifying the item (e.g. a local path).
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
