"""Exception hierarchy for ingestion and search."""


class BookSearchError(Exception):
    """Base class for all errors raised by booksearch."""


class IngestError(BookSearchError):
    """Building the corpus failed. Fatal: the process must not serve a partial index."""


class QueryError(BookSearchError):
    """A single query could not be run. Recoverable per request."""


class EmptyQueryError(QueryError):
    """The query has no usable characters after sanitization."""

    def __init__(self, raw_query: str) -> None:
        super().__init__(f"Query has no searchable content: {raw_query!r}")
        self.raw_query = raw_query


class QueryParseError(QueryError):
    """The sanitized query was rejected by the query parser."""

    def __init__(self, query: str, reason: str) -> None:
        super().__init__(f"Could not parse query {query!r}: {reason}")
        self.query = query
        self.reason = reason


class IndexCorruptionError(BookSearchError):
    """A retrieved document is missing a stored field."""
