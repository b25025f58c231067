"""Audio Ingest - Storage backends and routing."""

from app.storage.base import (
    LocalStorageError,
    RemoteStorageError,
    StorageBackend,
    StorageError,
    StorageErrorCode,
    StorageExhaustedError,
    StoredAudio,
)
from app.storage.local import LocalStorage
from app.storage.remote import RemoteStorage
from app.storage.router import StorageRouter, build_storage_router

__all__ = [
    "LocalStorage",
    "LocalStorageError",
    "RemoteStorage",
    "RemoteStorageError",
    "StorageBackend",
    "StorageError",
    "StorageErrorCode",
    "StorageExhaustedError",
    "StorageRouter",
    "StoredAudio",
    "build_storage_router",
]
