"""Audio Ingest - FastAPI application.

Accepts raw PCM audio on POST /audio, wraps it in a WAV container and stores
it remotely (when configured) with fallback to a local directory.

Run with:
    python -m services.ingest_api.main --addr :8080 --remote-url https://store.example/bucket
    uvicorn --factory services.ingest_api.main:create_app  # env-only config, dev server
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Annotated

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from app import __version__
from app.config import Settings, load_settings
from app.schemas import HealthResponse
from app.storage import StorageRouter, build_storage_router
from app.utils.atomic_io import cleanup_orphan_temp_files
from services.ingest_api.service import IngestError, IngestErrorCode, ingest_audio_bytes

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# --- Dependencies ---


def get_storage_router(request: Request) -> StorageRouter:
    """Dependency that provides the StorageRouter built at startup."""
    return request.app.state.storage_router


def get_settings(request: Request) -> Settings:
    """Dependency that provides the process Settings."""
    return request.app.state.settings


# --- Lifespan ---


def _cleanup_orphan_temp_files_safe(router: StorageRouter) -> None:
    """Remove partial files left in the local storage directory (best-effort)."""
    local = router.local
    if local is None:
        return
    try:
        removed = cleanup_orphan_temp_files(local.directory)
        if removed > 0:
            logger.info("Startup cleanup: removed %d orphan temp files", removed)
    except Exception:
        logger.warning("Startup cleanup failed (non-fatal)", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Clean up orphan temp files on startup, release the router on shutdown."""
    router: StorageRouter = app.state.storage_router
    _cleanup_orphan_temp_files_safe(router)
    yield
    router.close()


# --- Error Handling ---


# Temp-file and storage failures are both server-side: the cause is logged,
# the client gets a generic message.
ERROR_MESSAGES = {
    IngestErrorCode.TEMP_FILE_FAILED: "Failed to create temp file",
    IngestErrorCode.STORAGE_FAILED: "Failed to save file to storage",
}


def make_error_response(error_code: str) -> PlainTextResponse:
    return PlainTextResponse(
        ERROR_MESSAGES.get(error_code, "Internal server error"),
        status_code=500,
    )


# --- App Factory ---


def create_app(
    settings: Settings | None = None,
    router: StorageRouter | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Resolved settings (defaults to environment-only settings).
        router: Storage router (defaults to one built from settings).

    Returns:
        Configured FastAPI app.
    """
    if settings is None:
        settings = load_settings([])
    if router is None:
        router = build_storage_router(settings)

    app = FastAPI(
        title="Audio Ingest",
        description="Receive raw PCM audio and store it as WAV (remote with local fallback).",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage_router = router

    @app.post(
        "/audio",
        response_class=PlainTextResponse,
        responses={
            400: {"description": "Request body could not be read"},
            500: {"description": "Temp file or storage failure"},
        },
        summary="Upload raw PCM audio",
    )
    async def post_audio(
        request: Request,
        storage_router: Annotated[StorageRouter, Depends(get_storage_router)],
        sample_rate: str | None = None,
        uid: str | None = None,
    ):
        """Store the request body as a mono 16 kHz 16-bit WAV file.

        sample_rate is logged only; the WAV format is fixed.
        """
        logger.info("Received request from uid: %s", uid)
        logger.info("Requested sample rate: %s", sample_rate)

        try:
            body = await request.body()
        except ClientDisconnect:
            logger.warning("Client disconnected before body was read (uid=%s)", uid)
            return PlainTextResponse("Failed to read request body", status_code=400)

        try:
            result = await run_in_threadpool(ingest_audio_bytes, storage_router, body)
        except IngestError as e:
            logger.error("Audio ingest failed (uid=%s): %s", uid, e)
            return make_error_response(e.error_code)
        except Exception:
            logger.exception("Unexpected error during audio ingest (uid=%s)", uid)
            return PlainTextResponse("Internal server error", status_code=500)

        return PlainTextResponse(f"Audio bytes received and saved as {result.filename}")

    @app.get("/health", response_model=HealthResponse, summary="Health check")
    def health_check(
        storage_router: Annotated[StorageRouter, Depends(get_storage_router)],
        app_settings: Annotated[Settings, Depends(get_settings)],
    ):
        """Report whether remote storage is enabled and the local directory."""
        local = storage_router.local
        return HealthResponse(
            remote_enabled=storage_router.remote_enabled,
            local_dir=str(local.directory if local is not None else app_settings.storage_dir),
        )

    return app


# --- Standalone Execution ---


def main(argv: Sequence[str] | None = None) -> int:
    settings = load_settings(argv)
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    app = create_app(settings)
    logger.info("Server starting on %s...", settings.listen_addr)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
