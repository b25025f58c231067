"""Audio Ingest - Ingest service logic.

Turns a raw PCM request body into a stored WAV file:
1. Generate the filename from the wall clock (DD_MM_YYYY_HH_MM_SS.wav)
2. Wrap the payload in a WAV container
3. Materialize the WAV to a temp file
4. Hand the temp file to the StorageRouter
5. Remove the temp file
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from app.storage import StorageError, StorageRouter
from app.utils.atomic_io import remove_quietly, write_all
from app.utils.wav import encode_wav

logger = logging.getLogger(__name__)

FILENAME_FORMAT = "%d_%m_%Y_%H_%M_%S.wav"


# --- Error Codes ---


class IngestErrorCode(StrEnum):
    """Error codes for the ingest request."""

    TEMP_FILE_FAILED = "TEMP_FILE_FAILED"
    STORAGE_FAILED = "STORAGE_FAILED"


class IngestError(Exception):
    """Base exception for ingest errors."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class TempFileError(IngestError):
    """Temp file could not be created or written."""

    def __init__(self, reason: str):
        super().__init__(IngestErrorCode.TEMP_FILE_FAILED, f"Failed to create temp file: {reason}")


class StorageFailedError(IngestError):
    """No storage backend accepted the file."""

    def __init__(self, reason: str):
        super().__init__(IngestErrorCode.STORAGE_FAILED, f"Failed to store file: {reason}")


# --- Result Types ---


@dataclass
class IngestResult:
    """Result of a successful ingest."""

    filename: str
    backend: str
    destination: str
    size_bytes: int


# --- Ingest Service ---


def generate_filename(now: datetime | None = None) -> str:
    """Build the stored filename from local wall-clock time."""
    if now is None:
        now = datetime.now()
    return now.strftime(FILENAME_FORMAT)


def write_temp_wav(data: bytes, filename: str) -> Path:
    """Write data to a new temp file named after filename.

    Raises:
        TempFileError: If the file cannot be created or written.
    """
    stem = Path(filename).stem
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f"{stem}_", suffix=".wav")
    except OSError as e:
        raise TempFileError(str(e)) from e

    tmp_path = Path(tmp_name)
    try:
        write_all(fd, data)
    except OSError as e:
        os.close(fd)
        remove_quietly(tmp_path)
        raise TempFileError(str(e)) from e
    os.close(fd)
    return tmp_path


def ingest_audio_bytes(
    router: StorageRouter,
    body: bytes,
    now: datetime | None = None,
) -> IngestResult:
    """Encode a raw PCM body as WAV and store it.

    Args:
        router: Storage router built at startup.
        body: Raw little-endian 16-bit PCM bytes (may be empty).
        now: Override for the wall clock (tests).

    Returns:
        IngestResult naming the stored file and where it went.

    Raises:
        TempFileError: If the temp file cannot be written.
        StorageFailedError: If every storage backend failed.
    """
    filename = generate_filename(now)
    wav_data = encode_wav(body)

    tmp_path = write_temp_wav(wav_data, filename)
    try:
        try:
            stored = router.store(tmp_path, filename)
        except StorageError as e:
            raise StorageFailedError(e.message) from e
    finally:
        remove_quietly(tmp_path)

    logger.info("Stored %s via %s backend at %s", filename, stored.backend, stored.destination)
    return IngestResult(
        filename=stored.filename,
        backend=stored.backend,
        destination=stored.destination,
        size_bytes=len(wav_data),
    )
