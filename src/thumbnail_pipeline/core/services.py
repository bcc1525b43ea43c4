"""Service implementations for the upload-triggered thumbnail pipeline."""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

from PIL import Image

from .error_handling import with_error_handling
from .exceptions import (
    DocumentStoreError,
    ImageProcessingError,
    StorageError,
    stage_errors,
)
from .image_utils import (
    JPEG_QUALITY,
    THUMBNAIL_PREFIX,
    THUMBNAIL_WIDTH,
    calculate_thumbnail_key,
    describe_image,
    resize_to_width,
)
from .models import (
    THUMBNAIL_CONTENT_TYPE,
    FilterDecision,
    GalleryRecord,
    PipelineResult,
    PipelineStage,
    PipelineStatus,
    StagedFile,
    ThumbnailArtifact,
    UploadEvent,
)
from .observability import InvocationMetrics, LogContext, MetricsCollector
from .protocols import (
    DocumentStoreProtocol,
    EventFilter,
    ImageProcessorProtocol,
    LoggerProtocol,
    S3ClientProtocol,
    ThumbnailService,
)
from .staging import staging_area

SKIP_MISSING_FIELDS = "missing bucket or object name"
SKIP_DERIVED_OUTPUT = "object is a generated thumbnail"
SKIP_OUTSIDE_SOURCE_PREFIX = "object is outside the source prefix"
SKIP_NOT_AN_IMAGE = "content type is not an image"


class UploadEventFilter(EventFilter):
    """
    Decide whether a finalize event should produce a thumbnail.

    Rules run in order and the first match wins: missing fields, derived
    output prefix, source prefix (only when one is configured), content type.
    """

    def __init__(
        self, source_prefix: str = "", thumbnail_prefix: str = THUMBNAIL_PREFIX
    ):
        self._source_prefix = source_prefix
        self._thumbnail_prefix = thumbnail_prefix

    def evaluate(self, event: UploadEvent) -> FilterDecision:
        """Evaluate an event against the filter rules."""
        bucket = event.bucket or ""
        key = event.name or ""
        content_type = event.content_type or None

        if not bucket or not key:
            return FilterDecision(accepted=False, reason=SKIP_MISSING_FIELDS)

        decision = FilterDecision(
            accepted=False,
            bucket=bucket,
            key=key,
            content_type=content_type,
            size=event.size,
        )

        if key.startswith(self._thumbnail_prefix):
            decision.reason = SKIP_DERIVED_OUTPUT
        elif self._source_prefix and not key.startswith(self._source_prefix):
            decision.reason = SKIP_OUTSIDE_SOURCE_PREFIX
        elif content_type and not content_type.startswith("image/"):
            decision.reason = SKIP_NOT_AN_IMAGE
        else:
            decision.accepted = True

        return decision


class ImageProcessorService:
    """Pillow-backed thumbnail renderer working on local files."""

    def __init__(
        self, target_width: int = THUMBNAIL_WIDTH, quality: int = JPEG_QUALITY
    ):
        self.target_width = target_width
        self.quality = quality

    @with_error_handling
    def create_thumbnail(self, source_path: str, dest_path: str) -> Dict[str, Any]:
        """Decode ``source_path``, resize it and write a JPEG to ``dest_path``."""
        with Image.open(source_path) as image:
            image.load()
            source_info = describe_image(image)
            thumbnail = resize_to_width(image, self.target_width)

        thumbnail.save(dest_path, format="JPEG", quality=self.quality)
        return {
            "source": source_info,
            "width": thumbnail.width,
            "height": thumbnail.height,
        }


@with_error_handling
def _download_object(
    s3_client: S3ClientProtocol, bucket: str, key: str, filename: str
) -> None:
    s3_client.download_file(Bucket=bucket, Key=key, Filename=filename)


@with_error_handling
def _upload_object(
    s3_client: S3ClientProtocol,
    bucket: str,
    key: str,
    filename: str,
    extra_args: Dict[str, Any],
) -> None:
    s3_client.upload_file(Filename=filename, Bucket=bucket, Key=key, ExtraArgs=extra_args)


class ThumbnailPipeline(ThumbnailService):
    """
    Filter -> stage -> transform -> publish -> clean up, for one event.

    Collaborators are injected so that a process builds them once and reuses
    them across invocations. ``handle`` never raises: fatal errors are logged
    with the source key and reported through the returned PipelineResult.
    There are no retries and no deduplication; a repeated event produces a
    second gallery record for the same thumbnail key.
    """

    def __init__(
        self,
        s3_client: S3ClientProtocol,
        document_store: DocumentStoreProtocol,
        logger: LoggerProtocol,
        event_filter: Optional[EventFilter] = None,
        image_processor: Optional[ImageProcessorProtocol] = None,
        gallery_collection: str = "gallery",
        thumbnail_prefix: str = THUMBNAIL_PREFIX,
        temp_dir: Optional[str] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._s3_client = s3_client
        self._document_store = document_store
        self._logger = logger
        self._event_filter = event_filter or UploadEventFilter(
            thumbnail_prefix=thumbnail_prefix
        )
        self._image_processor = image_processor or ImageProcessorService()
        self._gallery_collection = gallery_collection
        self._thumbnail_prefix = thumbnail_prefix
        self._temp_dir = temp_dir
        self._metrics_collector = metrics_collector

    def handle(self, event: UploadEvent) -> PipelineResult:
        """Run the pipeline for one finalize event."""
        start_time = time.time()
        source_key = event.name or ""
        log_context = LogContext(
            correlation_id=f"thumb_{source_key}_{int(start_time * 1000)}",
            operation="generate_thumbnail",
            component="thumbnail_pipeline",
        ).with_metadata(bucket=event.bucket, source_key=source_key)

        result = PipelineResult(source_key=source_key)

        try:
            decision = self._event_filter.evaluate(event)
            if not decision.accepted:
                result.status = PipelineStatus.SKIPPED
                result.stage = PipelineStage.DONE
                result.reason = decision.reason
                self._logger.info("Skipping upload", log_context, reason=decision.reason)
                return result

            result.thumbnail_key = calculate_thumbnail_key(
                decision.key, self._thumbnail_prefix
            )
            result.record_id = self._process(decision, result, log_context)
            result.status = PipelineStatus.SUCCEEDED
            result.stage = PipelineStage.DONE
            self._logger.info(
                "Thumbnail generated and gallery record added",
                log_context,
                thumbnail_key=result.thumbnail_key,
            )

        except Exception as e:  # noqa: BLE001
            result.status = PipelineStatus.FAILED
            result.failed_stage = result.failed_stage or result.stage
            result.stage = PipelineStage.DONE
            result.error = str(e)
            self._logger.error(
                "Error generating thumbnail",
                log_context.with_metadata(
                    stage=result.failed_stage.value, error=str(e)
                ),
            )

        finally:
            result.processing_time = time.time() - start_time
            self._record_metric(start_time, result)

        return result

    def _process(
        self,
        decision: FilterDecision,
        result: PipelineResult,
        log_context: LogContext,
    ) -> str:
        result.stage = PipelineStage.STAGING
        with staging_area(decision.key, result.thumbnail_key, self._temp_dir) as (
            source,
            thumbnail,
        ):
            try:
                self._stage(decision, source, log_context)

                result.stage = PipelineStage.TRANSFORMING
                artifact = self._transform(
                    source, thumbnail, result.thumbnail_key, log_context
                )

                result.stage = PipelineStage.PUBLISHING
                self._upload(decision, artifact, log_context)
                return self._add_record(decision, artifact, log_context)
            except Exception:
                result.failed_stage = result.stage
                raise
            finally:
                result.stage = PipelineStage.CLEANING_UP

    def _stage(
        self, decision: FilterDecision, source: StagedFile, log_context: LogContext
    ) -> None:
        self._logger.debug(
            "Downloading original image", log_context.with_operation("download_image")
        )
        with stage_errors(StorageError, "Download"):
            _download_object(self._s3_client, decision.bucket, decision.key, source.path)

    def _transform(
        self,
        source: StagedFile,
        thumbnail: StagedFile,
        thumbnail_key: str,
        log_context: LogContext,
    ) -> ThumbnailArtifact:
        self._logger.debug(
            "Generating thumbnail", log_context.with_operation("create_thumbnail")
        )
        with stage_errors(ImageProcessingError, "Transform"):
            info = self._image_processor.create_thumbnail(source.path, thumbnail.path)
        self._logger.debug(
            "Thumbnail rendered",
            log_context.with_operation("create_thumbnail").with_metadata(
                **{f"source_{k}": v for k, v in info.get("source", {}).items()}
            ),
            width=info["width"],
            height=info["height"],
        )
        return ThumbnailArtifact(
            key=thumbnail_key,
            staged=thumbnail,
            width=info["width"],
            height=info["height"],
            quality=getattr(self._image_processor, "quality", JPEG_QUALITY),
        )

    def _upload(
        self,
        decision: FilterDecision,
        artifact: ThumbnailArtifact,
        log_context: LogContext,
    ) -> None:
        self._logger.debug(
            "Uploading thumbnail",
            log_context.with_operation("upload_thumbnail"),
            thumbnail_key=artifact.key,
        )
        extra_args = {
            "ContentType": artifact.content_type,
            "Metadata": {
                "original-path": quote(decision.key, safe="/"),
                "generated-at": datetime.now(timezone.utc).isoformat(),
            },
        }
        with stage_errors(StorageError, "Upload"):
            _upload_object(
                self._s3_client,
                decision.bucket,
                artifact.key,
                artifact.staged.path,
                extra_args,
            )

    def _add_record(
        self,
        decision: FilterDecision,
        artifact: ThumbnailArtifact,
        log_context: LogContext,
    ) -> str:
        self._logger.debug(
            "Creating gallery record", log_context.with_operation("add_gallery_record")
        )
        record = GalleryRecord(
            original_path=decision.key,
            thumbnail_path=artifact.key,
            content_type=decision.content_type or THUMBNAIL_CONTENT_TYPE,
            size=decision.size,
        )
        with stage_errors(DocumentStoreError, "Gallery record"):
            return self._document_store.add(
                self._gallery_collection, record.to_document()
            )

    def _record_metric(self, start_time: float, result: PipelineResult) -> None:
        if self._metrics_collector is None:
            return
        self._metrics_collector.record_metric(
            InvocationMetrics(
                operation="generate_thumbnail",
                start_time=start_time,
                end_time=time.time(),
                status=result.status.value,
                source_key=result.source_key or "",
                failed_stage=result.failed_stage.value if result.failed_stage else None,
                error_message=result.error or None,
            )
        )
