"""
Trigger adapters for the thumbnail pipeline.

Each hosting platform delivers the finalize notification in its own shape;
the adapters below normalize it into an UploadEvent and hand it to one
process-wide ThumbnailPipeline built at cold start.

  handle_storage_object  payload is the object resource itself
  handle_cloud_event     CloudEvent with the object resource under ``data``
  handle_s3_event        S3 notification (optionally SQS-wrapped) records
  ping                   health check
"""
from __future__ import annotations

import json
import mimetypes
import urllib.parse
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError

from .core.factories import ThumbnailPipelineFactory
from .core.logging_config import get_logger
from .core.models import PipelineResult, UploadEvent
from .core.services import ThumbnailPipeline

logger = get_logger("thumbnail-pipeline.handlers")

_pipeline: ThumbnailPipeline | None = None


def get_pipeline() -> ThumbnailPipeline:
    """Return the process-wide pipeline, creating its clients on first use."""
    global _pipeline
    if _pipeline is None:
        _pipeline = ThumbnailPipelineFactory.create_pipeline()
    return _pipeline


def event_from_payload(payload: Any) -> UploadEvent:
    """Build an UploadEvent from an object resource, tolerating junk input."""
    if not isinstance(payload, Mapping):
        logger.warning("Ignoring non-mapping event payload: %r", type(payload).__name__)
        return UploadEvent()
    try:
        return UploadEvent.model_validate(dict(payload))
    except ValidationError as exc:
        logger.warning("Malformed event payload: %s", exc)
        return UploadEvent()


def event_from_s3_record(record: Mapping[str, Any]) -> UploadEvent:
    """Build an UploadEvent from one S3 notification record."""
    s3_info = record.get("s3", {}) or {}
    bucket = (s3_info.get("bucket") or {}).get("name") or None
    s3_object = s3_info.get("object") or {}
    key = urllib.parse.unquote_plus(s3_object.get("key", "") or "") or None

    # S3 notifications carry no content type; infer one from the key.
    content_type = mimetypes.guess_type(key)[0] if key else None

    return event_from_payload(
        {
            "bucket": bucket,
            "name": key,
            "contentType": content_type,
            "size": s3_object.get("size"),
        }
    )


def handle_storage_object(
    data: Any, pipeline: ThumbnailPipeline | None = None
) -> PipelineResult:
    """Entry point for triggers that pass the object resource directly."""
    return (pipeline or get_pipeline()).handle(event_from_payload(data))


def handle_cloud_event(
    cloud_event: Any, pipeline: ThumbnailPipeline | None = None
) -> PipelineResult:
    """Entry point for CloudEvent ``storage.object.v1.finalized`` triggers."""
    if isinstance(cloud_event, Mapping):
        data = cloud_event.get("data") or {}
    else:
        data = getattr(cloud_event, "data", None) or {}
    return handle_storage_object(data, pipeline=pipeline)


def handle_s3_event(
    event: Mapping[str, Any],
    context: object = None,
    pipeline: ThumbnailPipeline | None = None,
) -> dict:
    """Lambda entry point for S3 (or SQS-wrapped S3) notifications."""
    active = pipeline or get_pipeline()
    results = []

    for record in event.get("Records", []):
        if record.get("eventSource") == "aws:sqs":
            try:
                body = json.loads(record.get("body") or "{}")
            except json.JSONDecodeError as exc:
                logger.warning("Skipping unreadable SQS message: %s", exc)
                continue
            s3_records = body.get("Records", []) if isinstance(body, dict) else []
        else:
            s3_records = [record]

        for s3_record in s3_records:
            result = active.handle(event_from_s3_record(s3_record))
            results.append(result.model_dump(mode="json"))

    return {"statusCode": 200, "results": results}


def ping() -> dict:
    """Health check used to verify the functions are deployed."""
    return {
        "status": "ok",
        "message": "Thumbnail pipeline is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
