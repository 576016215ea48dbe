"""Paragraph-level full-text search over a fixed collection of books."""

__version__ = "1.0.0"
