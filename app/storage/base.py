"""Audio Ingest - Storage backend contract and error taxonomy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Protocol


class StorageErrorCode(StrEnum):
    """Error codes for storage attempts."""

    REMOTE_WRITE_FAILED = "REMOTE_WRITE_FAILED"
    DIRECTORY_CREATE_FAILED = "DIRECTORY_CREATE_FAILED"
    SOURCE_OPEN_FAILED = "SOURCE_OPEN_FAILED"
    DESTINATION_CREATE_FAILED = "DESTINATION_CREATE_FAILED"
    COPY_FAILED = "COPY_FAILED"
    STORAGE_EXHAUSTED = "STORAGE_EXHAUSTED"


class StorageError(Exception):
    """Base exception for storage errors."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class RemoteStorageError(StorageError):
    """Remote write failed (transport error or non-success status)."""

    def __init__(self, remote_path: str, reason: str):
        self.remote_path = remote_path
        super().__init__(
            StorageErrorCode.REMOTE_WRITE_FAILED,
            f"Remote write of {remote_path} failed: {reason}",
        )


class LocalStorageError(StorageError):
    """Local write failed; error_code names the failing step."""


class StorageExhaustedError(StorageError):
    """Every configured backend failed; errors holds one entry per attempt."""

    def __init__(self, filename: str, errors: Sequence[StorageError]):
        self.errors = tuple(errors)
        self.last_error = self.errors[-1] if self.errors else None
        super().__init__(
            StorageErrorCode.STORAGE_EXHAUSTED,
            f"All storage attempts failed for {filename}; last error: {self.last_error}",
        )


@dataclass(frozen=True)
class StoredAudio:
    """Where a file ended up. Not persisted."""

    filename: str
    backend: str
    destination: str


class StorageBackend(Protocol):
    """A single storage attempt.

    Implementations write the file at source_path under filename and return a
    destination descriptor, or raise StorageError.
    """

    name: str

    def write(self, source_path: Path, filename: str) -> str: ...
