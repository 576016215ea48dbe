"""Data models for the book search application."""

from booksearch.models.book import Book, Chapter
from booksearch.models.paragraph import ParagraphDocument
from booksearch.models.query_result import ResultRecord

__all__ = [
    "Book",
    "Chapter",
    "ParagraphDocument",
    "ResultRecord",
]
