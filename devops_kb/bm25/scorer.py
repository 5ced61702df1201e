"""
Okapi BM25 scorer.

BM25 (Best Match 25) is a probabilistic ranking function used for information retrieval.

Formula:
    idf(t)      = ln(1 + (N - df + 0.5) / (df + 0.5))
    score(t, d) = idf(t) × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × dl/avgdl))

Where:
    N = number of documents in the index
    df = number of documents containing term t
    tf = term frequency in document d
    k1 = term frequency saturation parameter (default: 1.2)
    b = length normalization parameter (default: 0.75)
    dl = document length (number of tokens)
    avgdl = average document length across the index

Query terms are not deduplicated: a term repeated in the query adds its
contribution once per occurrence. Terms unknown to the index contribute nothing.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from .tokenizer import tokenize

if TYPE_CHECKING:
    from .index import BM25Index

K1 = 1.2
B = 0.75


@dataclass
class SearchResult:
    """Single ranked document"""
    doc_id: int
    score: float                              # BM25 score (higher = more relevant)
    text: str                                 # Original document content
    metadata: Optional[Dict[str, str]] = None


class BM25Scorer:
    """Okapi BM25 ranking over a BM25Index"""

    def __init__(self, k1: float = K1, b: float = B):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
                Higher = more weight to term frequency
                Default: 1.2 (standard)

            b: Length normalization parameter
                Higher = more penalty for long documents
                Range: 0.0 - 1.0
                Default: 0.75 (standard)
        """
        self.k1 = k1
        self.b = b

    @staticmethod
    def idf(doc_count: int, doc_freq: int) -> float:
        """Inverse document frequency, always > 0 for 0 < df <= N"""
        return math.log(1 + (doc_count - doc_freq + 0.5) / (doc_freq + 0.5))

    def term_score(self, tf: int, doc_length: int, avg_doc_length: float) -> float:
        """BM25 term-frequency component (without IDF)"""
        numerator = tf * (self.k1 + 1)
        denominator = tf + self.k1 * (1 - self.b + self.b * (doc_length / avg_doc_length))
        return numerator / denominator

    def search(self, index: "BM25Index", query: str, limit: int = 0) -> List[SearchResult]:
        """
        Rank documents in the index against a free-text query.

        Args:
            index: Index to search
            query: Free-text query (tokenized like documents)
            limit: Maximum number of results; <= 0 returns every match

        Returns:
            Matching documents sorted by score (descending), ties broken
            by ascending document id

        Example:
            >>> from devops_kb.bm25 import BM25Index
            >>> index = BM25Index()
            >>> index.add_document(1, "deploy cloud run service")
            >>> index.add_document(2, "storage bucket upload")
            >>> [r.doc_id for r in BM25Scorer().search(index, "cloud deploy")]
            [1]
        """
        query_terms = tokenize(query)
        if not query_terms or index.doc_count == 0:
            return []

        scores: Dict[int, float] = {}
        doc_lengths = index.doc_lengths
        avg_doc_length = index.avg_doc_length

        for term in query_terms:
            doc_freq = index.document_frequencies.get(term)
            if doc_freq is None:
                continue

            idf = self.idf(index.doc_count, doc_freq)

            for doc_id, tf in index.postings(term).items():
                contribution = idf * self.term_score(tf, doc_lengths[doc_id], avg_doc_length)
                scores[doc_id] = scores.get(doc_id, 0.0) + contribution

        results = []
        for doc_id, score in scores.items():
            document = index.get_document(doc_id)
            results.append(SearchResult(
                doc_id=doc_id,
                score=score,
                text=document.content,
                metadata=document.metadata,
            ))

        # Score descending, then id ascending for reproducible ordering
        results.sort(key=lambda r: (-r.score, r.doc_id))

        if limit > 0:
            results = results[:limit]
        return results
