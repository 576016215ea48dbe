"""In-memory Whoosh index holding one document per paragraph."""

import logging

from whoosh.analysis import StemmingAnalyzer
from whoosh.fields import ID, TEXT, Schema
from whoosh.filedb.filestore import RamStorage
from whoosh.searching import Searcher
from whoosh.writing import IndexWriter

from booksearch.errors import IngestError

logger = logging.getLogger(__name__)

BOOK_FIELD = "book_title"
CHAPTER_FIELD = "chapter_title"
PARAGRAPH_FIELD = "paragraph_text"

REQUIRED_FIELDS: tuple[str, ...] = (BOOK_FIELD, CHAPTER_FIELD, PARAGRAPH_FIELD)


def paragraph_analyzer() -> StemmingAnalyzer:
    """Analyzer shared by indexing and query parsing of paragraph text.

    Lowercases and stems English words. No stop list, so every query word
    can match; tokens longer than 40 characters are dropped.
    """
    return StemmingAnalyzer(stoplist=None, minsize=1, maxsize=40)


def build_schema() -> Schema:
    """Create the paragraph document schema."""
    return Schema(
        book_title=ID(stored=True),
        chapter_title=TEXT(stored=True),
        paragraph_text=TEXT(stored=True, analyzer=paragraph_analyzer()),
    )


class SearchIndex:
    """Process-lifetime paragraph index.

    Written only during ingestion, one writer per book, and then sealed.
    Every search opens its own searcher, which is a consistent point-in-time
    view, so any number of searches may run concurrently once ingestion is
    over.

    Args:
        schema: Schema to create the index with. Defaults to ``build_schema()``.
        writer_limit_mb: Memory budget handed to each Whoosh writer.
    """

    def __init__(self, schema: Schema | None = None, writer_limit_mb: int = 128) -> None:
        self._storage = RamStorage()
        self._index = self._storage.create_index(schema or build_schema())
        self._writer_limit_mb = writer_limit_mb
        self._sealed = False

    @property
    def schema(self) -> Schema:
        """The schema the index was created with."""
        return self._index.schema

    @property
    def sealed(self) -> bool:
        """Whether ingestion has finished and writers are refused."""
        return self._sealed

    def require_fields(self, names: tuple[str, ...] = REQUIRED_FIELDS) -> None:
        """Check that the schema defines every field in ``names``.

        Raises:
            IngestError: If a field is missing from the schema.
        """
        missing = [name for name in names if name not in self._index.schema]
        if missing:
            raise IngestError(f"Index schema is missing fields: {', '.join(missing)}")

    def writer(self) -> IndexWriter:
        """Open a writer for one ingestion batch.

        Raises:
            IngestError: If the index has been sealed.
        """
        if self._sealed:
            raise IngestError("Index is sealed; no further documents can be added")
        return self._index.writer(limitmb=self._writer_limit_mb)

    def seal(self) -> None:
        """Mark ingestion as finished. Later calls to ``writer()`` fail."""
        self._sealed = True
        logger.info("Search index sealed with %d documents", self.doc_count())

    def searcher(self) -> Searcher:
        """Open a point-in-time searcher. Close it (or use ``with``) when done."""
        return self._index.searcher()

    def doc_count(self) -> int:
        """Number of committed documents."""
        return self._index.doc_count()
