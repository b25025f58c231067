"""Audio Ingest - HTTP ingest service.

FastAPI endpoint that stores raw PCM uploads as WAV files.
"""

__all__: list[str] = []
