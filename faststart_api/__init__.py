"""Fast-start video upload service."""

__version__ = "0.1.0"
