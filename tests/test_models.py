"""Tests for core data models."""

import os

from thumbnail_pipeline.core.models import (
    GalleryRecord,
    PipelineResult,
    PipelineStage,
    PipelineStatus,
    StagedFile,
    UploadEvent,
)


class TestUploadEvent:
    """Tests for UploadEvent parsing."""

    def test_upload_event_from_platform_payload(self):
        """Test that the camelCase platform payload is accepted."""
        event = UploadEvent.model_validate(
            {
                "bucket": "b",
                "name": "gallery/photo.jpg",
                "contentType": "image/jpeg",
                "size": "500000",
                "metageneration": "1",
            }
        )
        assert event.bucket == "b"
        assert event.name == "gallery/photo.jpg"
        assert event.content_type == "image/jpeg"
        assert event.size == 500000

    def test_upload_event_by_field_name(self):
        """Test construction with Python field names."""
        event = UploadEvent(bucket="b", name="a.png", content_type="image/png", size=10)
        assert event.content_type == "image/png"
        assert event.size == 10

    def test_upload_event_defaults(self):
        """Test that every field is optional."""
        event = UploadEvent()
        assert event.bucket is None
        assert event.name is None
        assert event.content_type is None
        assert event.size is None

    def test_upload_event_zero_size_is_unknown(self):
        """Test that a zero or empty size normalizes to None."""
        assert UploadEvent(size=0).size is None
        assert UploadEvent(size="0").size is None
        assert UploadEvent(size="").size is None

    def test_upload_event_unparseable_size_is_unknown(self):
        """Test that garbage sizes do not break parsing."""
        assert UploadEvent(size="lots").size is None


class TestGalleryRecord:
    """Tests for GalleryRecord serialization."""

    def test_to_document_uses_stored_field_names(self):
        """Test that documents use camelCase keys and omit createdAt."""
        record = GalleryRecord(
            original_path="gallery/photo.jpg",
            thumbnail_path="thumbnails/photo-320.jpg",
            content_type="image/jpeg",
            size=500000,
        )
        assert record.to_document() == {
            "originalPath": "gallery/photo.jpg",
            "thumbnailPath": "thumbnails/photo-320.jpg",
            "contentType": "image/jpeg",
            "size": 500000,
        }

    def test_default_content_type_and_null_size(self):
        """Test defaults for optional fields."""
        record = GalleryRecord(originalPath="a.png", thumbnailPath="thumbnails/a-320.jpg")
        document = record.to_document()
        assert document["contentType"] == "image/jpeg"
        assert document["size"] is None


class TestStagedFile:
    """Tests for StagedFile."""

    def test_staged_file_owner_defaults_to_current_process(self, tmp_path):
        """Test owner pid and existence check."""
        path = tmp_path / "photo.jpg"
        staged = StagedFile(path=str(path))
        assert staged.owner_pid == os.getpid()
        assert staged.exists is False
        path.write_bytes(b"x")
        assert staged.exists is True


class TestPipelineResult:
    """Tests for PipelineResult."""

    def test_pipeline_result_defaults(self):
        """Test PipelineResult default values."""
        result = PipelineResult()
        assert result.status == PipelineStatus.FAILED
        assert result.stage == PipelineStage.FILTERING
        assert result.failed_stage is None
        assert result.record_id is None
        assert result.success is False

    def test_pipeline_result_success_property(self):
        """Test success mirrors the succeeded status."""
        assert PipelineResult(status=PipelineStatus.SUCCEEDED).success is True
        assert PipelineResult(status=PipelineStatus.SKIPPED).success is False

    def test_pipeline_result_json_dump(self):
        """Test enum values serialize as plain strings."""
        dumped = PipelineResult(
            source_key="k", status=PipelineStatus.SKIPPED, stage=PipelineStage.DONE
        ).model_dump(mode="json")
        assert dumped["status"] == "skipped"
        assert dumped["stage"] == "done"
