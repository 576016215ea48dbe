"""Query result data models."""

from pydantic import BaseModel


class ResultRecord(BaseModel):
    """A single ranked paragraph returned by a search."""

    book: str
    chapter: str
    text: str
    score: float = 0.0
