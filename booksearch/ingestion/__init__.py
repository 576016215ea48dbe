"""Book ingestion: loading, normalization and indexing."""

from booksearch.ingestion.indexer import BookIndexer, build_corpus
from booksearch.ingestion.loader import ChapterDirectory, load_book, load_catalog
from booksearch.ingestion.normalizer import ChapterParagraphs, normalize_chapter_title

__all__ = [
    "BookIndexer",
    "ChapterDirectory",
    "ChapterParagraphs",
    "build_corpus",
    "load_book",
    "load_catalog",
    "normalize_chapter_title",
]
