"""Student notes with remote sync and local fallback."""

__version__ = "0.1.0"
