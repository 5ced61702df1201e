"""
BM25 (Okapi) lexical search over small knowledge corpora.

Components:
- tokenizer: lowercase ASCII-letter tokenization
- index: append-only document store with BM25 statistics and postings
- scorer: BM25 ranking with deterministic tie-breaking
- codec: binary persistence (serialize/deserialize, save/load files)
- errors: persistence error taxonomy

Typical use:
    index = BM25Index()
    index.add_document(1, "deploy cloud run service", {"source": "patterns/run.md"})
    save_index(index, "patterns_index.bm25")

    index = load_index("patterns_index.bm25")
    results = index.search("cloud deploy", limit=5)
"""

from .tokenizer import tokenize
from .scorer import BM25Scorer, SearchResult
from .index import BM25Index, Document
from .errors import IndexPersistenceError, IndexIOError, IndexDecodeError
from .codec import serialize, deserialize, save_index, load_index

__all__ = [
    "tokenize",
    "BM25Scorer",
    "SearchResult",
    "BM25Index",
    "Document",
    "IndexPersistenceError",
    "IndexIOError",
    "IndexDecodeError",
    "serialize",
    "deserialize",
    "save_index",
    "load_index",
]
