"""Testing utilities and fakes for the thumbnail pipeline."""

from .fakes import (
    FakeDocumentStore,
    FakeLogger,
    FakeS3Client,
    S3Bucket,
    S3Object,
    create_test_image,
    setup_test_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeDocumentStore",
    "FakeLogger",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "setup_test_environment",
]
