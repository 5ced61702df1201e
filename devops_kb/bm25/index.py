"""
In-memory BM25 index over short knowledge documents.

Holds the documents plus every statistic the Okapi BM25 formula needs:

    doc_lengths[id]             token count of each document
    term_frequencies[id][term]  occurrences of term inside document id
    document_frequencies[term]  number of documents containing term
    avg_doc_length              mean of doc_lengths
    doc_count                   number of documents

On top of that it keeps a postings map (term -> {doc_id: tf}) and an
id -> Document map, so that scoring touches only matching documents and
result lookup is O(1). Neither of those is persisted; they are rebuilt from
term_frequencies when an index is restored.

The index is append-only. Documents are never updated or removed.
"""

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .scorer import BM25Scorer, SearchResult
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """Single indexed document"""
    id: int                                  # Unique within one index, assigned by the loader
    content: str                             # Original text, returned verbatim to callers
    metadata: Optional[Dict[str, str]] = None  # e.g. {"source": "knowledge/cloudbuild.md"}


class BM25Index:
    """
    Append-only BM25 index.

    Build phase: call add_document() once per document (single writer).
    Query phase: call search() from any number of readers once the build is done.
    """

    def __init__(self):
        self._documents: List[Document] = []
        self._by_id: Dict[int, Document] = {}
        self._doc_lengths: Dict[int, int] = {}
        self._term_frequencies: Dict[int, Dict[str, int]] = {}
        self._document_frequencies: Dict[str, int] = {}
        self._postings: Dict[str, Dict[int, int]] = {}
        self._total_length = 0
        self._avg_doc_length = 0.0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def documents(self) -> List[Document]:
        """Documents in insertion order (do not mutate)"""
        return self._documents

    @property
    def doc_lengths(self) -> Dict[int, int]:
        return self._doc_lengths

    @property
    def term_frequencies(self) -> Dict[int, Dict[str, int]]:
        return self._term_frequencies

    @property
    def document_frequencies(self) -> Dict[str, int]:
        return self._document_frequencies

    @property
    def avg_doc_length(self) -> float:
        return self._avg_doc_length

    @property
    def doc_count(self) -> int:
        return len(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def postings(self, term: str) -> Dict[int, int]:
        """Return {doc_id: tf} for a term (empty dict if the term is unknown)"""
        return self._postings.get(term, {})

    def get_document(self, doc_id: int) -> Optional[Document]:
        return self._by_id.get(doc_id)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_document(self, doc_id: int, content: str, metadata: Optional[Dict[str, str]] = None) -> None:
        """
        Tokenize a document and fold it into the index statistics.

        Empty content is accepted: the document gets length 0, contributes no
        terms, and still counts towards doc_count and avg_doc_length.

        Ids are unique within an index: a doc_id that is already present is
        logged and ignored, leaving the first document and all statistics as
        they were. The call never raises.

        Args:
            doc_id: Unique document id within this index
            content: Full document text (kept verbatim)
            metadata: Optional string-to-string mapping (e.g. source path)
        """
        tokens = tokenize(content)
        term_counts = dict(Counter(tokens))

        with self._lock:
            if doc_id in self._by_id:
                logger.warning(f"Document id {doc_id} is already indexed, ignoring duplicate")
                return

            document = Document(
                id=doc_id,
                content=content,
                metadata=dict(metadata) if metadata else None,
            )
            self._documents.append(document)
            self._by_id[doc_id] = document
            self._doc_lengths[doc_id] = len(tokens)
            self._term_frequencies[doc_id] = term_counts

            # Each document adds at most 1 to a term's DF
            for term, count in term_counts.items():
                self._document_frequencies[term] = self._document_frequencies.get(term, 0) + 1
                self._postings.setdefault(term, {})[doc_id] = count

            # Integer running total keeps the mean identical to a full re-sum
            self._total_length += len(tokens)
            self._avg_doc_length = self._total_length / len(self._documents)

        logger.debug(f"Indexed document {doc_id}: {len(tokens)} tokens, {len(term_counts)} unique terms")

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def search(self, query: str, limit: int = 0, scorer: Optional[BM25Scorer] = None) -> List[SearchResult]:
        """Rank documents for a free-text query (see BM25Scorer.search)"""
        return (scorer or BM25Scorer()).search(self, query, limit=limit)

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    @classmethod
    def from_state(
        cls,
        documents: Iterable[Document],
        doc_lengths: Dict[int, int],
        term_frequencies: Dict[int, Dict[str, int]],
        document_frequencies: Dict[str, int],
        avg_doc_length: float,
    ) -> "BM25Index":
        """
        Rebuild an index from persisted statistics.

        Stored statistics are taken as-is (avg_doc_length is not recomputed),
        derived lookup structures (postings, id map, running total) are rebuilt.
        Callers are expected to have validated consistency beforehand.
        """
        index = cls()
        for document in documents:
            index._documents.append(document)
            index._by_id[document.id] = document

        index._doc_lengths = dict(doc_lengths)
        index._term_frequencies = {doc_id: dict(tf) for doc_id, tf in term_frequencies.items()}
        index._document_frequencies = dict(document_frequencies)
        index._total_length = sum(index._doc_lengths.values())
        index._avg_doc_length = float(avg_doc_length)

        for document in index._documents:
            for term, count in index._term_frequencies[document.id].items():
                if count > 0:
                    index._postings.setdefault(term, {})[document.id] = count

        return index
