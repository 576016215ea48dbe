"""Tests for the query engine."""

import logging
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from whoosh.fields import ID, TEXT, Schema
from whoosh.qparser import QueryParser
from whoosh.qparser.common import QueryParserError
from whoosh.query import NullQuery

from booksearch.config import SearchConfig
from booksearch.errors import (
    EmptyQueryError,
    IndexCorruptionError,
    QueryError,
    QueryParseError,
)
from booksearch.ingestion.indexer import BookIndexer
from booksearch.models.book import Book
from booksearch.retrieval.query_engine import QueryEngine, sanitize_query
from booksearch.storage.search_index import SearchIndex, paragraph_analyzer

LANTERN_LINES = [f"{'lantern ' * (i % 5 + 1)}on shelf number {i}" for i in range(30)]

CHAPTERS: list[tuple[str, str]] = [
    (
        "prologue",
        "The storm raged over the lighthouse all night.\nThe lamp burned until dawn.",
    ),
    (
        "chapter1",
        "The keeper was running up the stairs to reach the lamp.\n"
        "A storm and a lamp and nothing else.",
    ),
    (
        "chapter2",
        "The dragon's fire lit the harbour.\nDragons fly over the sea.",
    ),
    ("chapter3", "\n".join(LANTERN_LINES)),
]


def _make_book(title: str = "The Lighthouse Keeper") -> Book:
    contents = [content for _, content in CHAPTERS]
    return Book(
        title=title,
        spine=tuple(label for label, _ in CHAPTERS),
        first_chapter_index=0,
        last_chapter_index=len(CHAPTERS) - 1,
        load_chapter=lambda index: contents[index],
    )


@pytest.fixture(scope="module")
def index() -> SearchIndex:
    index = SearchIndex()
    BookIndexer(index).ingest(_make_book())
    index.seal()
    return index


@pytest.fixture
def engine(index: SearchIndex) -> QueryEngine:
    return QueryEngine(index)


# ── Sanitization ─────────────────────────────────────────────────────────────


class TestSanitizeQuery:
    def test_removes_punctuation(self) -> None:
        assert sanitize_query("dragon's fire!") == "dragons fire"

    def test_trims_whitespace(self) -> None:
        assert sanitize_query("  lamp  ") == "lamp"

    def test_removes_query_syntax(self) -> None:
        assert sanitize_query('title:"lamp*" OR (storm)') == "titlelamp OR storm"

    def test_removes_non_ascii(self) -> None:
        assert sanitize_query("café naïve") == "caf nave"

    def test_removes_tabs_and_newlines_inside(self) -> None:
        assert sanitize_query("lamp\tstorm\nsea") == "lampstormsea"

    def test_trim_happens_before_filtering(self) -> None:
        assert sanitize_query("lamp !") == "lamp "

    def test_only_punctuation_becomes_empty(self) -> None:
        assert sanitize_query("?!.,") == ""


# ── Search ───────────────────────────────────────────────────────────────────


class TestSearch:
    def test_returns_matching_paragraph(self, engine: QueryEngine) -> None:
        results = engine.search("harbour")
        assert len(results) == 1
        assert results[0].book == "The Lighthouse Keeper"
        assert results[0].chapter == "Chapter 2"
        assert results[0].text == "The dragon's fire lit the harbour."

    def test_chapter_title_is_normalized(self, engine: QueryEngine) -> None:
        results = engine.search("raged")
        assert [r.chapter for r in results] == ["Prologue"]

    def test_query_terms_are_stemmed(self, engine: QueryEngine) -> None:
        results = engine.search("runs")
        assert [r.text for r in results] == [
            "The keeper was running up the stairs to reach the lamp."
        ]

    def test_case_insensitive(self, engine: QueryEngine) -> None:
        assert len(engine.search("HARBOUR")) == 1

    def test_punctuated_query(self, engine: QueryEngine) -> None:
        texts = {r.text for r in engine.search("dragon's fire!")}
        assert texts == {"The dragon's fire lit the harbour.", "Dragons fly over the sea."}

    def test_terms_are_or_combined(self, engine: QueryEngine) -> None:
        texts = {r.text for r in engine.search("harbour stairs")}
        assert texts == {
            "The dragon's fire lit the harbour.",
            "The keeper was running up the stairs to reach the lamp.",
        }

    def test_match_all_terms(self, index: SearchIndex) -> None:
        engine = QueryEngine(index, SearchConfig(match_all_terms=True))
        results = engine.search("storm lamp")
        assert [r.text for r in results] == ["A storm and a lamp and nothing else."]

    def test_absent_term_returns_empty_list(self, engine: QueryEngine) -> None:
        assert engine.search("zzzznonexistentzzzz") == []

    def test_more_than_limit_returns_twenty(self, engine: QueryEngine) -> None:
        results = engine.search("lantern")
        assert len(results) == 20
        assert all("lantern" in r.text for r in results)

    def test_results_ranked_by_score(self, engine: QueryEngine) -> None:
        scores = [r.score for r in engine.search("lantern")]
        assert scores == sorted(scores, reverse=True)
        assert scores[0] > 0

    def test_higher_term_frequency_ranks_first(self, engine: QueryEngine) -> None:
        top = engine.search("lantern")[0]
        assert top.text.startswith("lantern " * 5)

    def test_custom_result_limit(self, index: SearchIndex) -> None:
        engine = QueryEngine(index, SearchConfig(result_limit=5))
        assert len(engine.search("lantern")) == 5

    def test_fewer_matches_than_limit(self, engine: QueryEngine) -> None:
        assert len(engine.search("storm")) == 2

    def test_logs_sanitized_query(
        self, engine: QueryEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="booksearch.retrieval.query_engine"):
            engine.search("dragon's fire!")
        assert 'Searched for "dragons fire"' in caplog.messages

    def test_search_does_not_modify_index(
        self, index: SearchIndex, engine: QueryEngine
    ) -> None:
        before = index.doc_count()
        engine.search("lamp")
        engine.search("lantern storm")
        assert index.doc_count() == before

    def test_concurrent_searches(self, engine: QueryEngine) -> None:
        queries = ["lamp", "storm", "lantern", "dragons", "harbour"] * 8
        expected = {q: engine.search(q) for q in set(queries)}

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(engine.search, queries))

        for query, records in zip(queries, results):
            assert records == expected[query]


# ── Errors ───────────────────────────────────────────────────────────────────


class TestSearchErrors:
    @pytest.mark.parametrize("raw_query", ["", "   ", "!!!", "¿¡", "\t\n"])
    def test_empty_query(self, engine: QueryEngine, raw_query: str) -> None:
        with pytest.raises(EmptyQueryError):
            engine.search(raw_query)

    def test_rejected_query_is_logged(
        self, engine: QueryEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="booksearch.retrieval.query_engine"):
            with pytest.raises(EmptyQueryError):
                engine.search("  ?! ")
        assert 'Searched for ""' in caplog.messages

    def test_empty_query_is_query_error(self, engine: QueryEngine) -> None:
        with pytest.raises(QueryError):
            engine.search("")

    def test_null_parse_is_empty_query(self, engine: QueryEngine) -> None:
        with patch.object(QueryParser, "parse", return_value=NullQuery):
            with pytest.raises(EmptyQueryError):
                engine.search("lamp")

    def test_parser_error(self, engine: QueryEngine) -> None:
        with patch.object(QueryParser, "parse", side_effect=QueryParserError("bad syntax")):
            with pytest.raises(QueryParseError) as exc_info:
                engine.search("lamp")

        assert exc_info.value.query == "lamp"
        assert isinstance(exc_info.value, QueryError)

    def test_missing_stored_field_is_corruption(self) -> None:
        schema = Schema(
            book_title=ID(stored=True),
            chapter_title=TEXT,
            paragraph_text=TEXT(stored=True, analyzer=paragraph_analyzer()),
        )
        index = SearchIndex(schema=schema)
        BookIndexer(index).ingest(_make_book())

        with pytest.raises(IndexCorruptionError, match="chapter_title"):
            QueryEngine(index).search("harbour")
