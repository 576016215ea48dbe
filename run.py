"""Entry point for the book search application."""

import logging
import sys

from booksearch.config import load_config
from booksearch.errors import QueryError
from booksearch.ingestion.indexer import build_corpus
from booksearch.retrieval.query_engine import QueryEngine


def main() -> None:
    """Build the corpus and answer the queries given on the command line."""
    config = load_config()
    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    # Ingestion errors abort startup
    index = build_corpus(config)
    engine = QueryEngine(index, config.search)

    for raw_query in sys.argv[1:]:
        try:
            results = engine.search(raw_query)
        except QueryError as exc:
            print(f"Invalid query: {exc}")
            continue

        print(f'{len(results)} results for "{raw_query}"')
        for rank, record in enumerate(results, start=1):
            print(f"{rank:2d}. [{record.score:.3f}] {record.book} / {record.chapter}")
            print(f"    {record.text}")


if __name__ == "__main__":
    main()
