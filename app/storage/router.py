"""Audio Ingest - Storage routing.

Tries an ordered list of storage backends, one attempt each, and stops at
the first success. With a remote target configured the order is
[remote, local], so local storage is only written when the remote write
fails. Without one the order is just [local].
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from app.config import Settings
from app.storage.base import StorageBackend, StorageError, StorageExhaustedError, StoredAudio
from app.storage.local import LocalStorage
from app.storage.remote import RemoteStorage

logger = logging.getLogger(__name__)


class StorageRouter:
    """Route a file to the first backend that accepts it."""

    def __init__(self, backends: Sequence[StorageBackend]):
        if not backends:
            raise ValueError("StorageRouter needs at least one backend")
        self.backends = tuple(backends)

    @property
    def remote_enabled(self) -> bool:
        return any(b.name == RemoteStorage.name for b in self.backends)

    @property
    def local(self) -> LocalStorage | None:
        for backend in self.backends:
            if isinstance(backend, LocalStorage):
                return backend
        return None

    def store(self, temp_file_path: str | Path, filename: str) -> StoredAudio:
        """Store the file at temp_file_path under filename.

        Args:
            temp_file_path: Path to the complete, materialized file.
            filename: Name to store the file under.

        Returns:
            StoredAudio naming the backend that accepted the file.

        Raises:
            StorageExhaustedError: If every backend failed.
        """
        temp_file_path = Path(temp_file_path)
        errors: list[StorageError] = []

        for index, backend in enumerate(self.backends):
            try:
                destination = backend.write(temp_file_path, filename)
            except StorageError as e:
                errors.append(e)
                if index + 1 < len(self.backends):
                    logger.warning(
                        "Storage backend %s failed for %s, falling back to %s: %s",
                        backend.name,
                        filename,
                        self.backends[index + 1].name,
                        e,
                    )
                else:
                    logger.error("Storage backend %s failed for %s: %s", backend.name, filename, e)
                continue

            return StoredAudio(filename=filename, backend=backend.name, destination=destination)

        raise StorageExhaustedError(filename, errors)

    def close(self) -> None:
        for backend in self.backends:
            close = getattr(backend, "close", None)
            if close is not None:
                close()


def build_storage_router(settings: Settings) -> StorageRouter:
    """Build the backend list described by settings."""
    backends: list[StorageBackend] = []
    if settings.remote_enabled:
        backends.append(
            RemoteStorage(
                settings.remote_url,
                upload_path=settings.upload_path,
                timeout=settings.remote_timeout_sec,
            )
        )
        logger.info(
            "Remote storage enabled: %s (upload path %r)",
            settings.remote_url,
            settings.upload_path,
        )
    backends.append(LocalStorage(settings.storage_dir))
    return StorageRouter(backends)
