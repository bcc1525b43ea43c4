"""Transient local storage for a single pipeline invocation."""

import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from .error_handling import CleanupContextManager
from .image_utils import source_basename
from .models import StagedFile


def release_staged_file(staged: StagedFile, cleanup: CleanupContextManager) -> None:
    """Delete a staged file, reporting failures to ``cleanup`` instead of raising."""
    try:
        os.remove(staged.path)
    except FileNotFoundError:
        # Never written (the run failed first) or already removed.
        pass
    except OSError as exc:
        cleanup.add_error(exc, staged.path)


def _local_name(source_key: str) -> str:
    """File name for the staged source; never escapes the work directory."""
    name = source_basename(source_key)
    if name in ("", ".", ".."):
        return "source"
    return name


@contextmanager
def staging_area(
    source_key: str,
    thumbnail_key: str,
    base_dir: Optional[str] = None,
) -> Iterator[Tuple[StagedFile, StagedFile]]:
    """
    Reserve local paths for the source copy and the thumbnail.

    Both files live in a fresh temporary directory owned by this invocation
    and are named after their object basenames. On exit, on every path, the
    files and the directory are removed; removal failures are logged as
    warnings and never raised.

    Args:
        source_key: Object key being processed
        thumbnail_key: Derived thumbnail key
        base_dir: Parent for the temporary directory (system default if None)

    Yields:
        (source StagedFile, thumbnail StagedFile)
    """
    work_dir = tempfile.mkdtemp(prefix="thumbnail-", dir=base_dir)
    source = StagedFile(
        path=os.path.join(work_dir, _local_name(source_key))
    )
    thumbnail = StagedFile(
        path=os.path.join(work_dir, "out-" + source_basename(thumbnail_key))
    )
    try:
        yield source, thumbnail
    finally:
        with CleanupContextManager(f"Cleanup of {work_dir}") as cleanup:
            release_staged_file(source, cleanup)
            release_staged_file(thumbnail, cleanup)
            try:
                os.rmdir(work_dir)
            except OSError as exc:
                cleanup.add_error(exc, work_dir)
