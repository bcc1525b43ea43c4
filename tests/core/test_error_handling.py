# tests/core/test_error_handling.py

import logging
from unittest import mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from PIL import Image, UnidentifiedImageError

from thumbnail_pipeline.core.exceptions import (
    ConfigurationError,
    DocumentStoreError,
    ImageProcessingError,
    StorageError,
    ThumbnailPipelineError,
)
from thumbnail_pipeline.core.error_handling import (
    with_error_handling,
    CleanupContextManager,
)


# --- Tests for Custom Exceptions ---

def test_custom_exceptions_raisable():
    """Test that custom exceptions can be raised and caught."""
    with pytest.raises(ImageProcessingError):
        raise ImageProcessingError("Test image error")
    with pytest.raises(StorageError):
        raise StorageError("Test storage error")
    with pytest.raises(DocumentStoreError):
        raise DocumentStoreError("Test record error")
    with pytest.raises(ConfigurationError):
        raise ConfigurationError("Test config error")

def test_custom_exception_inheritance():
    """Test that custom exceptions share the pipeline base class."""
    for exc_cls in (ImageProcessingError, StorageError, DocumentStoreError, ConfigurationError):
        assert issubclass(exc_cls, ThumbnailPipelineError)
    assert issubclass(ThumbnailPipelineError, Exception)

# --- Tests for @with_error_handling decorator ---

@pytest.fixture
def mock_logger():
    """Fixture to mock the logger used by the decorator."""
    with mock.patch('thumbnail_pipeline.core.error_handling.logging') as mock_logging:
        mock_log_instance = mock.Mock()
        mock_logging.getLogger.return_value = mock_log_instance
        yield mock_log_instance

def test_with_error_handling_passes_through_result(mock_logger):
    """Test that successful calls return unchanged and log nothing."""
    @with_error_handling
    def func_ok():
        return 42

    assert func_ok() == 42
    mock_logger.error.assert_not_called()

def test_with_error_handling_wraps_client_error(mock_logger):
    """Test @with_error_handling wrapping botocore ClientError into StorageError."""
    @with_error_handling
    def func_raising_client_error():
        raise ClientError(
            error_response={'Error': {'Code': '404', 'Message': 'Not Found'}},
            operation_name='HeadObject'
        )

    with pytest.raises(StorageError) as excinfo:
        func_raising_client_error()

    assert "Storage operation failed" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, ClientError)
    mock_logger.error.assert_called_once()
    _, kwargs = mock_logger.error.call_args
    assert kwargs.get('exc_info') is True

def test_with_error_handling_wraps_botocore_connection_error(mock_logger):
    """Test that transport-level botocore errors also become StorageError."""
    @with_error_handling
    def func_raising_connection_error():
        raise EndpointConnectionError(endpoint_url="https://s3.example.invalid")

    with pytest.raises(StorageError):
        func_raising_connection_error()

def test_with_error_handling_wraps_pil_error(mock_logger):
    """Test @with_error_handling wrapping UnidentifiedImageError into ImageProcessingError."""
    @with_error_handling
    def func_raising_pil_error():
        raise UnidentifiedImageError("Cannot identify image file")

    with pytest.raises(ImageProcessingError) as excinfo:
        func_raising_pil_error()

    assert "Failed to identify image" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, UnidentifiedImageError)

def test_with_error_handling_wraps_decompression_bomb(mock_logger):
    """Test that oversized images become ImageProcessingError."""
    @with_error_handling
    def func_raising_bomb():
        raise Image.DecompressionBombError("too many pixels")

    with pytest.raises(ImageProcessingError, match="Image too large"):
        func_raising_bomb()

def test_with_error_handling_passes_pipeline_errors_untouched(mock_logger):
    """Test that already-typed pipeline errors are not wrapped or logged again."""
    @with_error_handling
    def func_raising_typed():
        raise DocumentStoreError("already typed")

    with pytest.raises(DocumentStoreError, match="already typed"):
        func_raising_typed()
    mock_logger.error.assert_not_called()

def test_with_error_handling_reraises_unmapped_exception(mock_logger):
    """Test that unmapped exceptions are re-raised by default."""
    class CustomNonMappedError(Exception):
        pass

    @with_error_handling
    def func_raising_unmapped_error():
        raise CustomNonMappedError("This one is not mapped.")

    with pytest.raises(CustomNonMappedError):
        func_raising_unmapped_error()

    mock_logger.error.assert_called_once()
    args, kwargs = mock_logger.error.call_args
    assert "This one is not mapped." in args[0]
    assert kwargs.get('exc_info') is True

# --- Tests for CleanupContextManager ---

def test_cleanup_context_manager_no_errors(caplog):
    """Test the manager with no reported errors."""
    with caplog.at_level(logging.DEBUG):
        with CleanupContextManager("Test Cleanup") as cleanup:
            pass
    assert cleanup.errors == []
    assert "Test Cleanup completed successfully." in caplog.text

def test_cleanup_context_manager_reports_errors_as_warnings(caplog):
    """Test that reported errors are logged as warnings and not raised."""
    with caplog.at_level(logging.DEBUG):
        with CleanupContextManager("Test Cleanup") as cleanup:
            cleanup.add_error(PermissionError("denied"), "/tmp/a.jpg")
            cleanup.add_error("busy", "/tmp/b.jpg")

    assert len(cleanup.errors) == 2
    assert cleanup.errors[0] == {"item": "/tmp/a.jpg", "error": "denied"}
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert any("completed with 2 error(s)" in r.getMessage() for r in warnings)
    assert any("/tmp/b.jpg" in r.getMessage() for r in warnings)

def test_cleanup_context_manager_propagates_block_exceptions(caplog):
    """Test that exceptions raised inside the block still propagate."""
    with pytest.raises(ValueError, match="inside"):
        with CleanupContextManager("Test Cleanup"):
            raise ValueError("inside")
    assert "failed due to an unhandled exception" in caplog.text

def test_mock_logger_is_scoped_to_error_handling(mock_logger):
    """Test that patching the decorator's logger leaves global logging intact."""
    assert isinstance(logging.getLogger("elsewhere"), logging.Logger)
