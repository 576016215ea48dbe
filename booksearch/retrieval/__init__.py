"""Query sanitization, parsing and ranked retrieval."""

from booksearch.retrieval.query_engine import QueryEngine, sanitize_query

__all__ = ["QueryEngine", "sanitize_query"]
