"""Book catalog loader: directories of rendered chapter files."""

import logging
import re
from collections.abc import Iterable
from pathlib import Path

import chardet
from bs4 import BeautifulSoup

from booksearch.config import BookEntry
from booksearch.models.book import Book

logger = logging.getLogger(__name__)

# Supported chapter file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, str] = {
    ".txt": "txt",
    ".md": "txt",
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
}

# Elements rendered as one line each; only the innermost ones are kept
BLOCK_TAGS: list[str] = [
    "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "li", "blockquote", "pre", "dt", "dd", "td", "div",
]


class ChapterDirectory:
    """Chapters of one book stored as one file per spine entry.

    The spine is either the given list of file names or, without one, every
    supported file in the directory sorted by name. Each chapter's label is
    its file stem (``chapter012.html`` -> ``chapter012``).

    Args:
        directory: Path to the book's chapter directory.
        spine_files: Chapter file names in reading order.

    Raises:
        FileNotFoundError: If the directory or a listed chapter file does not exist.
        ValueError: If a listed chapter file has an unsupported extension.
    """

    def __init__(self, directory: str | Path, spine_files: list[str] | None = None) -> None:
        self._directory = Path(directory)
        if not self._directory.is_dir():
            raise FileNotFoundError(f"Book directory not found: {self._directory}")

        if spine_files is None:
            self._files = sorted(
                path
                for path in self._directory.iterdir()
                if path.is_file() and path.suffix.lower() in SUPPORTED_FORMATS
            )
        else:
            self._files = [self._directory / name for name in spine_files]

        for path in self._files:
            if path.suffix.lower() not in SUPPORTED_FORMATS:
                raise ValueError(
                    f"Unsupported chapter format: '{path.suffix}'. "
                    f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}"
                )
            if not path.is_file():
                raise FileNotFoundError(f"Chapter file not found: {path}")

    @property
    def spine(self) -> tuple[str, ...]:
        """Chapter labels (file stems) in reading order."""
        return tuple(path.stem for path in self._files)

    def read_chapter(self, index: int) -> str:
        """Return the rendered plain text of the chapter at ``index``.

        Args:
            index: Spine index.

        Returns:
            Chapter text, one paragraph per line.
        """
        path = self._files[index]
        if SUPPORTED_FORMATS[path.suffix.lower()] == "html":
            return self._read_html(path)
        return self._read_txt(path)

    def _read_txt(self, file_path: Path) -> str:
        """Read a plain text file, falling back to chardet when not UTF-8."""
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            pass

        raw_bytes = file_path.read_bytes()
        detected = chardet.detect(raw_bytes)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence", 0)

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                file_path,
                encoding,
                confidence * 100,
            )

        return raw_bytes.decode(encoding)

    def _read_html(self, file_path: Path) -> str:
        """Render an HTML chapter to text with one line per block.

        Only innermost block elements are rendered, so inline markup such as
        ``<em>`` or ``<a>`` stays on its paragraph's line. Line breaks and
        runs of whitespace inside a block collapse to single spaces.

        Args:
            file_path: Path to the HTML file.

        Returns:
            The blocks' text joined by newlines.
        """
        soup = BeautifulSoup(self._read_txt(file_path), "lxml")

        for tag in soup(["script", "style"]):
            tag.decompose()
        for br in soup.find_all("br"):
            br.replace_with(" ")

        root = soup.body or soup
        lines = []
        for tag in root.find_all(BLOCK_TAGS):
            if tag.find(BLOCK_TAGS):
                continue
            text = re.sub(r"\s+", " ", tag.get_text(separator="")).strip()
            if text:
                lines.append(text)

        if not lines:
            return re.sub(r"[ \t]+", " ", root.get_text(separator="")).strip()
        return "\n".join(lines)


def load_book(entry: BookEntry) -> Book:
    """Build a Book descriptor for one catalog entry.

    Args:
        entry: Catalog entry from the configuration.

    Returns:
        A Book whose chapters are read lazily from disk.
    """
    chapters = ChapterDirectory(entry.path, entry.spine)
    spine = chapters.spine
    last = entry.last_chapter_index
    if last is None:
        last = len(spine) - 1

    logger.debug("Loaded spine of '%s': %d chapters", entry.title, len(spine))
    return Book(
        title=entry.title,
        spine=spine,
        first_chapter_index=entry.first_chapter_index,
        last_chapter_index=last,
        skippable_chapters=frozenset(entry.skippable_chapters),
        load_chapter=chapters.read_chapter,
    )


def load_catalog(entries: Iterable[BookEntry]) -> list[Book]:
    """Build Book descriptors for every catalog entry."""
    return [load_book(entry) for entry in entries]
