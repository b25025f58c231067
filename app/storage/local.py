"""Audio Ingest - Local directory storage backend.

Copies a file into the storage directory with atomic publish semantics:
each write goes to its own ".<filename>.<random>.tmp" file, then is renamed
onto the final name.

Each failing step raises LocalStorageError with its own error code:
- DIRECTORY_CREATE_FAILED: storage directory cannot be created
- SOURCE_OPEN_FAILED: source file cannot be opened
- DESTINATION_CREATE_FAILED: destination (temp) file cannot be created
- COPY_FAILED: reading, writing, syncing or the final rename failed
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from app.storage.base import LocalStorageError, StorageErrorCode
from app.utils.atomic_io import TEMP_SUFFIX, fsync_directory, remove_quietly, write_all

logger = logging.getLogger(__name__)

DIR_MODE = 0o755
FILE_MODE = 0o644
CHUNK_SIZE = 65536


class LocalStorage:
    """Local storage target rooted at a directory."""

    name = "local"

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        """Create the storage directory (and parents) if missing."""
        try:
            self.directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise LocalStorageError(
                StorageErrorCode.DIRECTORY_CREATE_FAILED,
                f"Failed to create storage directory {self.directory}: {e}",
            ) from e

    def write(self, source_path: Path, filename: str) -> str:
        self.ensure_directory()

        dest_path = self.directory / filename

        try:
            src_fd = os.open(source_path, os.O_RDONLY)
        except OSError as e:
            raise LocalStorageError(
                StorageErrorCode.SOURCE_OPEN_FAILED,
                f"Failed to open source file {source_path}: {e}",
            ) from e

        try:
            # One temp file per write; concurrent writes to the same name each
            # publish their own complete file and the last rename wins.
            try:
                dst_fd, temp_name = tempfile.mkstemp(
                    dir=self.directory,
                    prefix=f".{filename}.",
                    suffix=TEMP_SUFFIX,
                )
            except OSError as e:
                raise LocalStorageError(
                    StorageErrorCode.DESTINATION_CREATE_FAILED,
                    f"Failed to create destination file {dest_path}: {e}",
                ) from e
            temp_path = Path(temp_name)

            try:
                os.fchmod(dst_fd, FILE_MODE)
                while chunk := os.read(src_fd, CHUNK_SIZE):
                    write_all(dst_fd, chunk)
                os.fsync(dst_fd)
            except OSError as e:
                os.close(dst_fd)
                remove_quietly(temp_path)
                raise LocalStorageError(
                    StorageErrorCode.COPY_FAILED,
                    f"Failed to copy file to {dest_path}: {e}",
                ) from e
            else:
                os.close(dst_fd)
        finally:
            os.close(src_fd)

        try:
            os.replace(temp_path, dest_path)
        except OSError as e:
            remove_quietly(temp_path)
            raise LocalStorageError(
                StorageErrorCode.COPY_FAILED,
                f"Failed to publish {dest_path}: {e}",
            ) from e

        fsync_directory(self.directory)

        logger.info(
            "File %s saved to local storage directory %s successfully.",
            filename,
            self.directory,
        )
        return str(dest_path)
