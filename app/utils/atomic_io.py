"""Audio Ingest - Low-level file I/O helpers.

Shared by the local storage backend, which publishes files atomically:
1. Write to a unique "*.tmp" file in the destination directory
2. Flush + fsync
3. Rename temp -> final (the publish boundary)

A final path therefore either holds a complete file or does not exist.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


def write_all(fd: int, data: bytes) -> None:
    """Write all bytes to a file descriptor, looping over short writes.

    Raises:
        OSError: If a write fails or returns 0 bytes unexpectedly.
    """
    view = memoryview(data)
    while view:
        try:
            written = os.write(fd, view)
        except InterruptedError:
            continue
        if written == 0:
            raise OSError("os.write() returned 0 bytes unexpectedly")
        view = view[written:]


def fsync_directory(dir_path: str | Path) -> None:
    """Best-effort fsync on a directory so a rename survives power loss."""
    try:
        fd = os.open(dir_path, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except (OSError, AttributeError):
        # O_DIRECTORY is missing on some platforms
        pass


def remove_quietly(path: str | Path) -> bool:
    """Remove a file if it exists. Returns True if a file was removed."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError:
        logger.debug("Could not remove %s", path, exc_info=True)
        return False
    return True


def cleanup_orphan_temp_files(directory: str | Path) -> int:
    """Remove in-progress files left behind by interrupted writes.

    Args:
        directory: Directory to scan (not recursive).

    Returns:
        Number of files removed.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    removed = 0
    for temp_file in directory.glob(f"*{TEMP_SUFFIX}"):
        if temp_file.is_file() and remove_quietly(temp_file):
            removed += 1
    return removed
