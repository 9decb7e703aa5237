"""Text and photo messaging backend."""

__version__ = "0.1.0"
