"""Audio Ingest - WAV container encoding.

Builds the canonical 44-byte RIFF/WAVE header for mono 16 kHz 16-bit PCM.
Format fields are fixed constants from app.config.
"""

import struct

from app.config import WAV_BITS_PER_SAMPLE, WAV_CHANNELS, WAV_SAMPLE_RATE

WAV_HEADER_SIZE = 44

# RIFF header, fmt chunk (PCM, 16 bytes), data chunk header
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")

PCM_FORMAT_TAG = 1
FMT_CHUNK_SIZE = 16

BYTE_RATE = WAV_SAMPLE_RATE * WAV_CHANNELS * WAV_BITS_PER_SAMPLE // 8
BLOCK_ALIGN = WAV_CHANNELS * WAV_BITS_PER_SAMPLE // 8


def build_wav_header(payload_length: int) -> bytes:
    """Build a WAV header for a PCM payload of the given length.

    Size fields wider than 32 bits are truncated, not rejected.

    Args:
        payload_length: Number of PCM bytes that follow the header.

    Returns:
        Exactly 44 bytes.

    Raises:
        ValueError: If payload_length is negative.
    """
    if payload_length < 0:
        raise ValueError(f"payload_length must be non-negative, got {payload_length}")

    return _HEADER_STRUCT.pack(
        b"RIFF",
        (36 + payload_length) & 0xFFFFFFFF,
        b"WAVE",
        b"fmt ",
        FMT_CHUNK_SIZE,
        PCM_FORMAT_TAG,
        WAV_CHANNELS,
        WAV_SAMPLE_RATE,
        BYTE_RATE,
        BLOCK_ALIGN,
        WAV_BITS_PER_SAMPLE,
        b"data",
        payload_length & 0xFFFFFFFF,
    )


def encode_wav(payload: bytes) -> bytes:
    """Wrap raw PCM bytes in a WAV container."""
    return build_wav_header(len(payload)) + payload


__all__ = [
    "WAV_HEADER_SIZE",
    "build_wav_header",
    "encode_wav",
]
