"""Shared pytest fixtures for Audio Ingest tests."""

import tempfile
from pathlib import Path

import httpx
import numpy as np
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.storage import LocalStorage, RemoteStorage, RemoteStorageError, StorageRouter
from services.ingest_api.main import create_app


class FakeRemoteBackend:
    """In-memory stand-in for the remote backend."""

    name = "remote"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.writes: dict[str, bytes] = {}

    def write(self, source_path: Path, filename: str) -> str:
        if self.fail:
            raise RemoteStorageError(filename, "simulated outage")
        self.writes[filename] = Path(source_path).read_bytes()
        return f"fake://{filename}"


@pytest.fixture
def fake_remote():
    """The FakeRemoteBackend class, for tests that build their own."""
    return FakeRemoteBackend


@pytest.fixture
def storage_dir(tmp_path):
    """Local storage directory (not created yet)."""
    return tmp_path / "audio_files"


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    """Redirect tempfile to a private directory so temp files can be inspected."""
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_dir))
    return tmp_dir


@pytest.fixture
def pcm_payload():
    """Half a second of a 440 Hz tone as 16-bit little-endian PCM."""
    t = np.arange(8000) / 16000
    samples = (np.sin(2 * np.pi * 440 * t) * 12000).astype("<i2")
    return samples.tobytes()


@pytest.fixture
def remote_requests():
    """Requests received by the mock remote endpoint."""
    return []


@pytest.fixture
def make_remote(remote_requests):
    """Factory for RemoteStorage wired to an httpx.MockTransport.

    status: HTTP status the mock returns; None simulates a connection error.
    """

    def _make(status=200, upload_path=""):
        def handler(request: httpx.Request) -> httpx.Response:
            remote_requests.append(request)
            if status is None:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(status)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return RemoteStorage("https://store.example/bucket", upload_path=upload_path, client=client)

    return _make


@pytest.fixture
def make_client(storage_dir, isolated_tempdir):
    """Factory for a TestClient around an app with the given remote backend.

    Yields a function taking the remote backend (or None for local-only) and
    an optional local directory override.
    """
    clients = []

    def _make(remote=None, local_dir=None):
        local_dir = local_dir or storage_dir
        backends = [remote] if remote is not None else []
        backends.append(LocalStorage(local_dir))
        settings = Settings(storage_dir=local_dir)
        app = create_app(settings, router=StorageRouter(backends))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
