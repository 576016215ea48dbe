"""Paragraph document model."""

from pydantic import BaseModel


class ParagraphDocument(BaseModel):
    """The indexed unit: one retained line of one chapter."""

    book_title: str
    chapter_title: str  # always the normalized title
    paragraph_text: str
