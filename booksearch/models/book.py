"""Book and chapter data models."""

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field


class Chapter(BaseModel):
    """One spine entry with its rendered plain-text content."""

    index: int
    raw_title: str
    content: str


class Book(BaseModel):
    """A book ready for indexing.

    ``spine`` holds the raw chapter labels in reading order. Only chapters in
    ``first_chapter_index..=last_chapter_index`` that are not listed in
    ``skippable_chapters`` are indexed. Chapter text is fetched on demand
    through ``load_chapter`` so that a book's content is never held in memory
    all at once.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    spine: tuple[str, ...]
    first_chapter_index: int
    last_chapter_index: int
    skippable_chapters: frozenset[int] = frozenset()
    load_chapter: Callable[[int], str] = Field(exclude=True, repr=False)

    def chapter(self, index: int) -> Chapter:
        """Load the chapter at ``index`` in the spine."""
        return Chapter(
            index=index,
            raw_title=self.spine[index],
            content=self.load_chapter(index),
        )

    def indexable_chapters(self) -> list[int]:
        """Spine indices that ingestion visits, in order."""
        return [
            i
            for i in range(self.first_chapter_index, self.last_chapter_index + 1)
            if i not in self.skippable_chapters
        ]
