"""Decoders, layouts and SQLite recording for vendor-specific hardware error sections."""

__version__ = "0.1.0"