"""Tests for app.storage.local module."""

import threading

import pytest

import app.storage.local as local_module
from app.storage import LocalStorage, LocalStorageError, StorageErrorCode


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "source.wav"
    path.write_bytes(b"RIFF" + b"\x00" * 100)
    return path


class TestLocalStorage:
    """Tests for LocalStorage.write."""

    def test_creates_directory_and_copies(self, tmp_path, source_file):
        """Should create the directory tree and copy the bytes."""
        directory = tmp_path / "nested" / "audio_files"
        storage = LocalStorage(directory)

        destination = storage.write(source_file, "01_01_2024_00_00_00.wav")

        dest_path = directory / "01_01_2024_00_00_00.wav"
        assert destination == str(dest_path)
        assert dest_path.read_bytes() == source_file.read_bytes()

    def test_existing_directory_is_fine(self, tmp_path, source_file):
        directory = tmp_path / "audio_files"
        directory.mkdir()

        LocalStorage(directory).write(source_file, "a.wav")

        assert (directory / "a.wav").exists()

    def test_overwrites_same_name(self, tmp_path, source_file):
        """Same-second filenames collide; the last write wins."""
        directory = tmp_path / "audio_files"
        directory.mkdir()
        (directory / "a.wav").write_bytes(b"older")

        LocalStorage(directory).write(source_file, "a.wav")

        assert (directory / "a.wav").read_bytes() == source_file.read_bytes()

    def test_no_temp_file_left_on_success(self, tmp_path, source_file):
        directory = tmp_path / "audio_files"

        LocalStorage(directory).write(source_file, "a.wav")

        assert [p.name for p in directory.iterdir()] == ["a.wav"]

    def test_directory_create_failure(self, tmp_path, source_file):
        """A file in the way of the directory should fail directory creation."""
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        storage = LocalStorage(blocker / "audio_files")

        with pytest.raises(LocalStorageError) as exc_info:
            storage.write(source_file, "a.wav")

        assert exc_info.value.error_code == StorageErrorCode.DIRECTORY_CREATE_FAILED

    def test_source_open_failure(self, tmp_path):
        storage = LocalStorage(tmp_path / "audio_files")

        with pytest.raises(LocalStorageError) as exc_info:
            storage.write(tmp_path / "missing.wav", "a.wav")

        assert exc_info.value.error_code == StorageErrorCode.SOURCE_OPEN_FAILED
        assert not (tmp_path / "audio_files" / "a.wav").exists()

    def test_destination_create_failure(self, tmp_path, monkeypatch, source_file):
        def failing_mkstemp(*args, **kwargs):
            raise PermissionError("read-only directory")

        monkeypatch.setattr(local_module.tempfile, "mkstemp", failing_mkstemp)
        directory = tmp_path / "audio_files"

        with pytest.raises(LocalStorageError) as exc_info:
            LocalStorage(directory).write(source_file, "a.wav")

        assert exc_info.value.error_code == StorageErrorCode.DESTINATION_CREATE_FAILED
        assert list(directory.iterdir()) == []

    def test_copy_failure_cleans_temp(self, tmp_path, monkeypatch, source_file):
        def failing_write_all(fd, data):
            raise OSError("disk full")

        monkeypatch.setattr(local_module, "write_all", failing_write_all)
        directory = tmp_path / "audio_files"

        with pytest.raises(LocalStorageError) as exc_info:
            LocalStorage(directory).write(source_file, "a.wav")

        assert exc_info.value.error_code == StorageErrorCode.COPY_FAILED
        assert list(directory.iterdir()) == []

    def test_overlapping_writes_to_same_name(self, tmp_path, monkeypatch):
        """Two same-second uploads overlapping in time both succeed; last rename wins."""
        directory = tmp_path / "audio_files"
        first_source = tmp_path / "first.wav"
        first_source.write_bytes(b"A" * 70000)
        second_source = tmp_path / "second.wav"
        second_source.write_bytes(b"B" * 50000)

        first_started = threading.Event()
        second_done = threading.Event()
        real_write_all = local_module.write_all

        def gated_write_all(fd, data):
            if threading.current_thread().name == "first-writer":
                first_started.set()
                assert second_done.wait(timeout=10)
            real_write_all(fd, data)

        monkeypatch.setattr(local_module, "write_all", gated_write_all)
        storage = LocalStorage(directory)
        errors = []

        def write_first():
            try:
                storage.write(first_source, "07_03_2024_09_05_02.wav")
            except Exception as e:
                errors.append(e)

        first = threading.Thread(target=write_first, name="first-writer")
        first.start()
        assert first_started.wait(timeout=10)

        storage.write(second_source, "07_03_2024_09_05_02.wav")
        second_done.set()
        first.join(timeout=10)

        assert not first.is_alive()
        assert errors == []
        dest_path = directory / "07_03_2024_09_05_02.wav"
        assert dest_path.read_bytes() == first_source.read_bytes()
        assert [p.name for p in directory.iterdir()] == ["07_03_2024_09_05_02.wav"]
