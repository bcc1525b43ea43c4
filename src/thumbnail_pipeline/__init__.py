"""Upload-triggered thumbnail generation for the gallery."""

__version__ = "0.1.0"
