"""Audio Ingest - Core application modules.

- config: fixed WAV format and runtime Settings
- utils.wav: WAV container encoding
- storage: remote/local backends and the fallback router
"""

__version__ = "0.1.0"
