"""Configuration loader for the book search application."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Book Search"
    version: str = "1.0.0"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class IndexConfig(BaseModel):
    """Search index configuration."""

    writer_limit_mb: int = 128


class SearchConfig(BaseModel):
    """Query engine configuration."""

    result_limit: int = 20
    match_all_terms: bool = False


class BookEntry(BaseModel):
    """One book in the catalog: a directory of chapter files."""

    title: str
    path: str
    spine: list[str] | None = None  # chapter file names in reading order; None sorts by name
    first_chapter_index: int = 0
    last_chapter_index: int | None = None  # None means the last spine entry
    skippable_chapters: list[int] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    books: list[BookEntry] = Field(default_factory=list)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Override log level from environment
    log_level = os.getenv("BOOKSEARCH_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config
