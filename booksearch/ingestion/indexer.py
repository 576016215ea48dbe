"""Index builder: turns books into paragraph documents."""

import logging
from collections.abc import Iterable

from whoosh.index import LockError
from whoosh.writing import IndexWriter

from booksearch.config import AppConfig
from booksearch.errors import IngestError
from booksearch.ingestion.loader import load_catalog
from booksearch.ingestion.normalizer import ChapterParagraphs, normalize_chapter_title
from booksearch.models.book import Book
from booksearch.models.paragraph import ParagraphDocument
from booksearch.storage.search_index import SearchIndex

logger = logging.getLogger(__name__)


class BookIndexer:
    """Adds books to a SearchIndex, one commit per book.

    Any failure aborts the book with IngestError and nothing of that book is
    committed. There are no retries.

    Args:
        index: The index to write into.
    """

    def __init__(self, index: SearchIndex) -> None:
        self._index = index

    def ingest(self, book: Book) -> int:
        """Index every retained paragraph of a book and commit.

        Args:
            book: The book to index.

        Returns:
            Number of paragraph documents added.

        Raises:
            IngestError: On invalid chapter bounds, a schema without the
                paragraph fields, an unreadable chapter or a failed write.
        """
        self._check_bounds(book)
        self._index.require_fields()

        try:
            writer = self._index.writer()
        except LockError as exc:
            raise IngestError(f"Could not open index writer for '{book.title}'") from exc

        try:
            count = self._write_chapters(writer, book)
        except Exception as exc:
            writer.cancel()
            raise IngestError(f"Failed to index '{book.title}': {exc}") from exc

        try:
            writer.commit()
        except Exception as exc:
            raise IngestError(f"Failed to commit '{book.title}'") from exc

        logger.info("Indexed %d paragraphs from '%s'", count, book.title)
        return count

    def _write_chapters(self, writer: IndexWriter, book: Book) -> int:
        """Add a document per retained line of every indexed chapter.

        Args:
            writer: Open writer for this book.
            book: The book being ingested.

        Returns:
            Number of documents added to the writer.
        """
        count = 0
        for index in range(book.first_chapter_index, book.last_chapter_index + 1):
            if index in book.skippable_chapters:
                logger.debug("Skipping chapter %d of '%s'", index, book.title)
                continue

            chapter = book.chapter(index)
            chapter_title = normalize_chapter_title(chapter.raw_title)
            for line in ChapterParagraphs(chapter.content):
                doc = ParagraphDocument(
                    book_title=book.title,
                    chapter_title=chapter_title,
                    paragraph_text=line,
                )
                writer.add_document(**doc.model_dump())
                count += 1
        return count

    def _check_bounds(self, book: Book) -> None:
        """Validate chapter bounds against the spine.

        Raises:
            IngestError: If the bounds or skip indices are out of range.
        """
        spine_len = len(book.spine)
        first, last = book.first_chapter_index, book.last_chapter_index

        if not 0 <= first <= last < spine_len:
            raise IngestError(
                f"Invalid chapter range {first}..={last} for '{book.title}' "
                f"(spine has {spine_len} entries)"
            )

        outside = sorted(i for i in book.skippable_chapters if not first <= i <= last)
        if outside:
            raise IngestError(
                f"Skippable chapters {outside} of '{book.title}' "
                f"are outside {first}..={last}"
            )


def build_corpus(config: AppConfig, books: Iterable[Book] | None = None) -> SearchIndex:
    """Build and seal the search index for every book.

    Books are ingested one after another, each committed on its own.

    Args:
        config: Application configuration.
        books: Books to ingest. Defaults to the catalog in ``config.books``.

    Returns:
        The sealed, read-only SearchIndex.

    Raises:
        IngestError: If any book fails to ingest.
    """
    if books is None:
        books = load_catalog(config.books)

    index = SearchIndex(writer_limit_mb=config.index.writer_limit_mb)
    indexer = BookIndexer(index)

    total = 0
    for book in books:
        total += indexer.ingest(book)

    index.seal()
    logger.info("Corpus ready: %d paragraphs", total)
    return index
