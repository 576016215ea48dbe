"""Chapter content and chapter title normalization."""

import string
from collections.abc import Callable, Iterator

# Lines starting with this are footnote/reference markup left over from rendering
NOISE_LINE_PREFIX = "["

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class ChapterParagraphs:
    """Candidate paragraphs of one chapter, one per line of rendered text.

    Empty lines and lines starting with ``[`` are dropped. Every other line,
    including whitespace-only ones, is yielded unchanged. The sequence is lazy
    and can be iterated any number of times.

    Args:
        content: The chapter's rendered plain text.
    """

    def __init__(self, content: str) -> None:
        self._content = content

    def __iter__(self) -> Iterator[str]:
        for line in self._content.split("\n"):
            line = line.removesuffix("\r")
            if not line:
                continue
            if line.startswith(NOISE_LINE_PREFIX):
                continue
            yield line


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


def _ascii_digits(text: str) -> str:
    return "".join(ch for ch in text if ch in string.digits)


# Evaluated top to bottom against the ASCII-lowercased label; first match wins.
# A "chapter" label without digits becomes "Chapter " (e.g. Roman numerals).
TITLE_RULES: tuple[tuple[Callable[[str], bool], Callable[[str], str]], ...] = (
    (lambda label: label == "prologue", lambda raw: "Prologue"),
    (lambda label: label == "epilogue", lambda raw: "Epilogue"),
    (lambda label: label.startswith("chapter"), lambda raw: f"Chapter {_ascii_digits(raw)}"),
)


def normalize_chapter_title(raw_title: str) -> str:
    """Map a raw spine label to its display title.

    Args:
        raw_title: Chapter label as found in the book's spine.

    Returns:
        ``Prologue``, ``Epilogue``, ``Chapter <digits>`` or the label unchanged.
    """
    label = _ascii_lower(raw_title)
    for matches, render in TITLE_RULES:
        if matches(label):
            return render(raw_title)
    return raw_title
