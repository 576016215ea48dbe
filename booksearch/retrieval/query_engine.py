"""Query engine: sanitize, parse, rank and materialize paragraph hits."""

import logging
import string

from whoosh import qparser
from whoosh.qparser import QueryParser
from whoosh.qparser.common import QueryParserError
from whoosh.query import NullQuery, Query
from whoosh.searching import Hit

from booksearch.config import SearchConfig
from booksearch.errors import EmptyQueryError, IndexCorruptionError, QueryParseError
from booksearch.models.query_result import ResultRecord
from booksearch.storage.search_index import (
    BOOK_FIELD,
    CHAPTER_FIELD,
    PARAGRAPH_FIELD,
    REQUIRED_FIELDS,
    SearchIndex,
)

logger = logging.getLogger(__name__)

ALLOWED_QUERY_CHARS = frozenset(string.ascii_letters + string.digits + " ")


def sanitize_query(raw_query: str) -> str:
    """Trim the query and keep only ASCII letters, digits and spaces.

    Removes anything the query grammar could interpret as syntax (quotes,
    colons, wildcards, brackets) along with non-ASCII text.
    """
    return "".join(ch for ch in raw_query.strip() if ch in ALLOWED_QUERY_CHARS)


class QueryEngine:
    """Runs free-text searches against a built SearchIndex.

    Safe to share between threads: every search opens its own searcher and
    parser, and nothing here writes to the index.

    Args:
        index: The ingested paragraph index.
        config: Result limit and term combination settings.
    """

    def __init__(self, index: SearchIndex, config: SearchConfig | None = None) -> None:
        self._index = index
        self._config = config or SearchConfig()

    def parse(self, raw_query: str) -> Query:
        """Sanitize and parse a raw query against the paragraph field.

        Args:
            raw_query: Query text as typed by the user.

        Raises:
            EmptyQueryError: If nothing searchable is left after sanitization.
            QueryParseError: If the query parser rejects the text.
        """
        return self._parse_sanitized(raw_query, sanitize_query(raw_query))

    def _parse_sanitized(self, raw_query: str, sanitized: str) -> Query:
        """Parse already sanitized text; ``raw_query`` is kept for error messages."""
        if not sanitized.strip():
            raise EmptyQueryError(raw_query)

        try:
            query = self._make_parser().parse(sanitized)
        except QueryParserError as exc:
            raise QueryParseError(sanitized, str(exc)) from exc

        if query is NullQuery:
            raise EmptyQueryError(raw_query)
        return query

    def search(self, raw_query: str) -> list[ResultRecord]:
        """Return the best matching paragraphs, highest score first.

        Args:
            raw_query: Query text as typed by the user.

        Returns:
            Up to ``result_limit`` records. An empty list means nothing matched.

        Raises:
            EmptyQueryError: If the query has no searchable content.
            QueryParseError: If the query cannot be parsed.
            IndexCorruptionError: If a hit lacks a stored field.
        """
        sanitized = sanitize_query(raw_query)
        logger.info('Searched for "%s"', sanitized)
        query = self._parse_sanitized(raw_query, sanitized)

        with self._index.searcher() as searcher:
            hits = searcher.search(query, limit=self._config.result_limit)
            return [self._to_record(hit) for hit in hits]

    def _make_parser(self) -> QueryParser:
        """Build a parser over the paragraph field with the configured term grouping."""
        group = qparser.AndGroup if self._config.match_all_terms else qparser.OrGroup
        return QueryParser(PARAGRAPH_FIELD, schema=self._index.schema, group=group)

    @staticmethod
    def _to_record(hit: Hit) -> ResultRecord:
        """Copy a hit's stored fields into a ResultRecord.

        Raises:
            IndexCorruptionError: If a stored field is missing.
        """
        fields = hit.fields()
        missing = [name for name in REQUIRED_FIELDS if fields.get(name) is None]
        if missing:
            raise IndexCorruptionError(
                f"Document {hit.docnum} is missing stored fields: {', '.join(missing)}"
            )

        return ResultRecord(
            book=fields[BOOK_FIELD],
            chapter=fields[CHAPTER_FIELD],
            text=fields[PARAGRAPH_FIELD],
            score=hit.score,
        )
