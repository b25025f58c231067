"""Audio Ingest - Configuration.

Fixed audio format constants plus the runtime Settings object.

Settings are resolved once at startup from command-line flags and the
environment (flags win over environment, environment wins over defaults)
and are read-only afterwards.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

# Canonical WAV format (fixed, never taken from request parameters)
WAV_CHANNELS = 1
WAV_SAMPLE_RATE = 16000
WAV_BITS_PER_SAMPLE = 16

# Defaults
DEFAULT_LISTEN_ADDR = ":8080"
DEFAULT_STORAGE_DIR = "./audio_files"
DEFAULT_REMOTE_TIMEOUT_SEC = 30.0
DEFAULT_LOG_LEVEL = "INFO"

# Environment variable names
ENV_SERVER_ADDR = "SERVER_ADDR"
ENV_STORAGE_DIR = "AUDIO_STORAGE_DIR"
ENV_LOG_LEVEL = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once before serving."""

    listen_addr: str = DEFAULT_LISTEN_ADDR
    storage_dir: Path = Path(DEFAULT_STORAGE_DIR)
    remote_url: str | None = None
    upload_path: str = ""
    remote_timeout_sec: float = DEFAULT_REMOTE_TIMEOUT_SEC
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_url)

    @property
    def host(self) -> str:
        return parse_listen_addr(self.listen_addr)[0]

    @property
    def port(self) -> int:
        return parse_listen_addr(self.listen_addr)[1]


def parse_listen_addr(addr: str) -> tuple[str, int]:
    """Split a listen address into (host, port).

    Accepts "host:port" or ":port". An empty host binds all interfaces.

    Raises:
        ValueError: If the port is missing or not a valid TCP port.
    """
    host, sep, port_str = addr.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be host:port or :port, got {addr!r}")
    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {addr!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range in listen address {addr!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Receive raw PCM audio over HTTP and store it as WAV")
    parser.add_argument(
        "--addr",
        default="",
        help=f"Server address (default: ${ENV_SERVER_ADDR} or {DEFAULT_LISTEN_ADDR})",
    )
    parser.add_argument(
        "--remote-url",
        default="",
        help="Remote storage endpoint URL; remote storage is disabled when omitted",
    )
    parser.add_argument(
        "--upload-path",
        default="",
        help="Path prefix for files written to remote storage (default: root)",
    )
    parser.add_argument(
        "--remote-timeout",
        type=float,
        default=DEFAULT_REMOTE_TIMEOUT_SEC,
        help="Timeout in seconds for a single remote write",
    )
    parser.add_argument(
        "--log-level",
        default="",
        help=f"Logging level (default: ${ENV_LOG_LEVEL} or {DEFAULT_LOG_LEVEL})",
    )
    return parser


def load_settings(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve Settings from command-line arguments and environment.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Frozen Settings instance.
    """
    if environ is None:
        environ = os.environ

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    listen_addr = args.addr or environ.get(ENV_SERVER_ADDR, "") or DEFAULT_LISTEN_ADDR
    try:
        parse_listen_addr(listen_addr)
    except ValueError as e:
        parser.error(str(e))

    if args.remote_timeout <= 0:
        parser.error("--remote-timeout must be positive")

    storage_dir = environ.get(ENV_STORAGE_DIR, "") or DEFAULT_STORAGE_DIR
    log_level = (args.log_level or environ.get(ENV_LOG_LEVEL, "") or DEFAULT_LOG_LEVEL).upper()
    if log_level not in logging.getLevelNamesMapping():
        parser.error(f"Unknown log level {log_level!r}")

    return Settings(
        listen_addr=listen_addr,
        storage_dir=Path(storage_dir),
        remote_url=args.remote_url or None,
        upload_path=args.upload_path,
        remote_timeout_sec=args.remote_timeout,
        log_level=log_level,
    )
