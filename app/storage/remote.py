"""Audio Ingest - Remote blob storage backend.

Writes a file to a remote store by HTTP PUT of its bytes to
{endpoint}/{upload_path}/{filename}. Any transport error or non-2xx
response is a RemoteStorageError.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path

import httpx

from app.storage.base import RemoteStorageError

logger = logging.getLogger(__name__)


class RemoteStorage:
    """Remote storage target reached over HTTP."""

    name = "remote"

    def __init__(
        self,
        endpoint: str,
        upload_path: str = "",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.upload_path = upload_path.strip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def remote_path(self, filename: str) -> str:
        """Effective remote path: upload_path/filename, or filename alone."""
        if self.upload_path:
            return posixpath.join(self.upload_path, filename)
        return filename

    def url_for(self, remote_path: str) -> str:
        return f"{self.endpoint}/{remote_path}"

    def write_bytes(self, remote_path: str, data: bytes) -> None:
        """PUT data at remote_path.

        Raises:
            RemoteStorageError: On transport failure or non-2xx status.
        """
        try:
            response = self._client.put(
                self.url_for(remote_path),
                content=data,
                headers={"Content-Type": "audio/wav"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteStorageError(remote_path, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise RemoteStorageError(remote_path, str(e) or type(e).__name__) from e

    def write(self, source_path: Path, filename: str) -> str:
        remote_path = self.remote_path(filename)
        try:
            data = Path(source_path).read_bytes()
        except OSError as e:
            raise RemoteStorageError(remote_path, f"cannot read {source_path}: {e}") from e

        self.write_bytes(remote_path, data)
        logger.info("File %s uploaded to remote storage at %s", filename, remote_path)
        return self.url_for(remote_path)

    def close(self) -> None:
        self._client.close()
