"""Factory classes for creating configured service instances."""

import logging
from typing import Any, Optional

import boto3

from .config import PipelineSettings, load_settings
from .document_store import DynamoDBDocumentStore
from .logging_config import setup_logger
from .observability import MetricsCollector, StructuredLogger
from .protocols import DocumentStoreProtocol, LoggerProtocol, S3ClientProtocol
from .services import ImageProcessorService, ThumbnailPipeline, UploadEventFilter


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(
        name: str = "thumbnail-pipeline", debug: bool = False
    ) -> LoggerProtocol:
        """Create a structured logger on top of the centralized configuration."""
        logger = setup_logger(name, level="DEBUG" if debug else None)
        return StructuredLogger(logger)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(settings: PipelineSettings, **kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional region and endpoint overrides."""
        session = boto3.Session(region_name=settings.aws_region)
        if settings.s3_endpoint_url:
            kwargs.setdefault("endpoint_url", settings.s3_endpoint_url)
        return session.client("s3", **kwargs)  # type: ignore


class DocumentStoreFactory:
    """Factory for creating the gallery document store."""

    @staticmethod
    def create_document_store(settings: PipelineSettings) -> DocumentStoreProtocol:
        """Create a DynamoDB-backed document store."""
        session = boto3.Session(region_name=settings.aws_region)
        kwargs = {}
        if settings.dynamodb_endpoint_url:
            kwargs["endpoint_url"] = settings.dynamodb_endpoint_url
        resource = session.resource("dynamodb", **kwargs)
        return DynamoDBDocumentStore(resource, table_prefix=settings.table_prefix)


class ThumbnailPipelineFactory:
    """Factory for creating the complete thumbnail pipeline."""

    @staticmethod
    def create_pipeline(
        s3_client: Optional[S3ClientProtocol] = None,
        document_store: Optional[DocumentStoreProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        settings: Optional[PipelineSettings] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> ThumbnailPipeline:
        """Create a fully configured pipeline, building default collaborators."""
        if settings is None:
            settings = load_settings()

        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(settings)

        if document_store is None:
            document_store = DocumentStoreFactory.create_document_store(settings)

        if logger is None:
            logger = LoggerFactory.create_logger(debug=settings.debug)

        if settings.debug:
            logging.getLogger("thumbnail_pipeline").setLevel(logging.DEBUG)

        event_filter = UploadEventFilter(
            source_prefix=settings.source_prefix,
            thumbnail_prefix=settings.thumbnail_prefix,
        )
        image_processor = ImageProcessorService(
            target_width=settings.thumbnail_width,
            quality=settings.jpeg_quality,
        )

        return ThumbnailPipeline(
            s3_client=s3_client,
            document_store=document_store,
            logger=logger,
            event_filter=event_filter,
            image_processor=image_processor,
            gallery_collection=settings.gallery_collection,
            thumbnail_prefix=settings.thumbnail_prefix,
            temp_dir=settings.temp_dir,
            metrics_collector=metrics_collector,
        )
