"""Cost and usage dashboard backend for cloud and AI providers."""

__version__ = "1.0.0"
