"""Audio Ingest - Pydantic models for API responses."""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response for the health check endpoint."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(default="ok", description="Service status")
    remote_enabled: bool = Field(..., description="True if a remote storage target is configured")
    local_dir: str = Field(..., description="Local storage directory used as fallback")


__all__ = [
    "HealthResponse",
]
