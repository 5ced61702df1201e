"""
Corpus loader - builds BM25 indices from directory trees.

One file = one document. The file path becomes the document's "source"
metadata. Ids are assigned sequentially in walk order; load_directory()
returns the next free id so several directories can be chained into one index:

    patterns = BM25Index()
    load_directory(patterns, "./patterns", 1)

    knowledge = BM25Index()
    next_id = load_directory(knowledge, "./knowledge", 1)
    load_directory(knowledge, "./.document-sources", next_id)

Traversal is recursive, and directories and files are visited in sorted order
so id assignment does not depend on the platform's directory listing order.
"""

import logging
import os
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from .bm25 import BM25Index

logger = logging.getLogger(__name__)


def _iter_files(root: Path) -> Iterator[Path]:
    """Yield every file under root, depth-first, in sorted order"""

    def on_error(error: OSError):
        logger.warning(f"Error walking directory {error.filename}: {error}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        # sort in-place so os.walk descends in a stable order
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def load_directory(index: BM25Index, root_path: Union[str, Path], start_id: int) -> int:
    """
    Add every file under root_path to the index.

    Unreadable files are logged and skipped; they never abort the walk.
    A missing root is logged and leaves the index untouched.

    Args:
        index: Index to populate
        root_path: Directory to walk recursively (a single file is also accepted)
        start_id: Id for the first document added

    Returns:
        Next unused document id
    """
    root = Path(root_path)
    doc_id = start_id

    if root.is_file():
        files = iter([root])
    elif root.is_dir():
        files = _iter_files(root)
    else:
        logger.warning(f"Error walking directory {root}: not found")
        return start_id

    for path in files:
        if not path.is_file():
            logger.debug(f"Skipping {path}: not a regular file")
            continue
        try:
            content = path.read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Error reading file {path}: {e}")
            continue

        index.add_document(doc_id, content, {"source": str(path)})
        logger.info(f"Added document {doc_id} from {path}")
        doc_id += 1

    logger.debug(f"Loaded {doc_id - start_id} documents from {root}")
    return doc_id


def build_corpus_indices(
    patterns_dir: Union[str, Path],
    knowledge_dir: Union[str, Path],
    extra_sources_dir: Optional[Union[str, Path]] = None,
) -> Tuple[BM25Index, BM25Index]:
    """
    Build the two independent indices served by the knowledge base.

    Args:
        patterns_dir: Root of the reusable pattern descriptions
        knowledge_dir: Root of the CI/CD knowledge snippets
        extra_sources_dir: Optional supplementary knowledge directory,
            chained after knowledge_dir when it exists

    Returns:
        (patterns_index, knowledge_index), each with ids starting at 1
    """
    patterns_index = BM25Index()
    load_directory(patterns_index, patterns_dir, 1)

    knowledge_index = BM25Index()
    next_id = load_directory(knowledge_index, knowledge_dir, 1)
    if extra_sources_dir is not None and Path(extra_sources_dir).is_dir():
        load_directory(knowledge_index, extra_sources_dir, next_id)
    elif extra_sources_dir is not None:
        logger.info(f"Supplementary sources directory {extra_sources_dir} not found, skipping")

    logger.info(
        f"Built indices: patterns={patterns_index.doc_count} docs, "
        f"knowledge={knowledge_index.doc_count} docs"
    )
    return patterns_index, knowledge_index
