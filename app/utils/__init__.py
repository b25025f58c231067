"""Audio Ingest - Utility modules."""

from app.utils.atomic_io import cleanup_orphan_temp_files, write_all
from app.utils.wav import WAV_HEADER_SIZE, build_wav_header, encode_wav

__all__ = [
    # atomic_io
    "cleanup_orphan_temp_files",
    "write_all",
    # wav
    "WAV_HEADER_SIZE",
    "build_wav_header",
    "encode_wav",
]
