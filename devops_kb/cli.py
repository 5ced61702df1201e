"""
Index builder / query command line.

Usage:
    devops-kb build
    devops-kb query <patterns|knowledge> <text...>

build walks KB_PATTERNS_DIR and KB_KNOWLEDGE_DIR (+ KB_EXTRA_SOURCES_DIR when
present), writes KB_PATTERNS_INDEX and KB_KNOWLEDGE_INDEX, then runs a smoke
search against the knowledge index.
"""

import logging
import sys
from typing import List, Optional

from .bm25 import IndexPersistenceError, SearchResult, load_index, save_index
from .config import Settings, load_env_files, load_settings
from .loader import build_corpus_indices
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

SMOKE_QUERY = "how to create a cloud build yaml"
SMOKE_LIMIT = 3
CONTENT_WIDTH = 100

USAGE = """Usage: devops-kb <command>
Commands:
  build                              Build the patterns and knowledge BM25 indices
  query <patterns|knowledge> <text>  Search a previously built index"""


def print_results(results: List[SearchResult]) -> None:
    """Print a Rank | Score | Content table (content on one line, truncated)"""
    print("-" * 51)
    print(f"{'Rank':<5} | {'Score':<10} | Content")
    print("-" * 51)
    for rank, result in enumerate(results, start=1):
        content = result.text.replace("\r", " ").replace("\n", " ")
        if len(content) > CONTENT_WIDTH:
            content = content[:CONTENT_WIDTH - 3] + "..."
        print(f"{rank:<5} | {result.score:<10.4f} | {content}")


def build(settings: Settings) -> int:
    patterns_index, knowledge_index = build_corpus_indices(
        settings.patterns_dir,
        settings.knowledge_dir,
        settings.extra_sources_dir,
    )

    exit_code = 0
    for name, index, path in (
        ("Patterns", patterns_index, settings.patterns_index),
        ("Knowledge", knowledge_index, settings.knowledge_index),
    ):
        try:
            save_index(index, path)
        except IndexPersistenceError as e:
            logger.error(f"Error saving {name.lower()} index: {e}")
            exit_code = 1
        else:
            print(f"{name} index saved to {path}")

    print(f"\nTest Search Query: '{SMOKE_QUERY}'")
    print_results(knowledge_index.search(SMOKE_QUERY, limit=SMOKE_LIMIT))
    return exit_code


def query(settings: Settings, corpus: str, text: str) -> int:
    paths = {"patterns": settings.patterns_index, "knowledge": settings.knowledge_index}
    if corpus not in paths:
        print(f"Unknown index: {corpus} (expected patterns or knowledge)")
        return 1

    try:
        index = load_index(paths[corpus])
    except IndexPersistenceError as e:
        logger.error(f"Error loading {corpus} index: {e}")
        return 1

    print(f"Search Query: '{text}'")
    print_results(index.search(text, limit=settings.result_limit))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv

    if not args:
        print(USAGE)
        return 1

    load_env_files()
    settings = load_settings()
    setup_logging(
        log_file=settings.log_file,
        console_level=getattr(logging, settings.log_level, logging.INFO),
    )

    command = args[0]
    if command == "build":
        return build(settings)
    if command == "query":
        if len(args) < 3:
            print(USAGE)
            return 1
        return query(settings, args[1], " ".join(args[2:]))

    print(f"Unknown command: {command}")
    print(USAGE)
    return 1


if __name__ == "__main__":
    sys.exit(main())
