"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Protocol

from .models import FilterDecision, PipelineResult, UploadEvent


class S3ClientProtocol(Protocol):
    """Protocol for the blob store operations the pipeline uses."""

    def download_file(self, Bucket: str, Key: str, Filename: str) -> None:
        """Download an object to a local file."""
        ...

    def upload_file(
        self,
        Filename: str,
        Bucket: str,
        Key: str,
        ExtraArgs: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Upload a local file to an object."""
        ...


class DocumentStoreProtocol(Protocol):
    """Protocol for an append-only document collection."""

    def add(self, collection: str, document: Mapping[str, Any]) -> str:
        """Insert a document, stamping its creation time. Returns its id."""
        ...


class ImageProcessorProtocol(Protocol):
    """Protocol for thumbnail rendering."""

    def create_thumbnail(self, source_path: str, dest_path: str) -> Dict[str, Any]:
        """Render ``source_path`` into a JPEG thumbnail at ``dest_path``."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class EventFilter(ABC):
    """Abstract gate deciding whether an upload should be processed."""

    @abstractmethod
    def evaluate(self, event: UploadEvent) -> FilterDecision:
        """Evaluate an event."""
        ...


class ThumbnailService(ABC):
    """Abstract end-to-end handler for one upload event."""

    @abstractmethod
    def handle(self, event: UploadEvent) -> PipelineResult:
        """Process one event. Never raises."""
        ...
