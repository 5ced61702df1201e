"""
Query façade over the two knowledge-base indices.

The tool layer only ever sees this interface:

    client = KnowledgeBaseClient.from_settings(load_settings())
    client.query_patterns("blue green deploy on cloud run")
    client.query_knowledge("how to create a cloud build yaml")

Each call returns a list of {content, metadata?, relevance_score} dicts,
best match first. Both indices are read-only after start-up, so one client
can be shared by concurrent readers.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel

from .bm25 import BM25Index, IndexPersistenceError, SearchResult, load_index
from .config import Settings

logger = logging.getLogger(__name__)


class QueryResultItem(BaseModel):
    content: str
    metadata: Optional[Dict[str, str]] = None  # Source info
    relevance_score: float                     # Helps the caller weigh confidence


class KnowledgeBaseClient:
    """Serves the "patterns" and "knowledge" indices"""

    def __init__(self, patterns: BM25Index, knowledge: BM25Index, limit: int = 0):
        """
        Args:
            patterns: Index of reusable pattern descriptions
            knowledge: Index of CI/CD knowledge snippets
            limit: Max results per query (<= 0 = every match)
        """
        self.patterns = patterns
        self.knowledge = knowledge
        self.limit = limit

    @classmethod
    def from_settings(cls, settings: Settings) -> "KnowledgeBaseClient":
        """
        Load both persisted indices.

        A missing or corrupt index file is replaced by an empty index (queries
        then return no results) unless settings.strict_load is set.

        Raises:
            IndexPersistenceError: Only when settings.strict_load is True
        """
        patterns = _load_or_empty(settings.patterns_index, "patterns", settings.strict_load)
        knowledge = _load_or_empty(settings.knowledge_index, "knowledge", settings.strict_load)
        return cls(patterns=patterns, knowledge=knowledge, limit=settings.result_limit)

    def query_patterns(self, query: str) -> List[dict]:
        return self._query(self.patterns, query)

    def query_knowledge(self, query: str) -> List[dict]:
        return self._query(self.knowledge, query)

    def query_patterns_json(self, query: str) -> str:
        """Same as query_patterns(), encoded as a JSON array"""
        return json.dumps(self.query_patterns(query), ensure_ascii=False)

    def query_knowledge_json(self, query: str) -> str:
        """Same as query_knowledge(), encoded as a JSON array"""
        return json.dumps(self.query_knowledge(query), ensure_ascii=False)

    def _query(self, index: BM25Index, query: str) -> List[dict]:
        results = index.search(query, limit=self.limit)
        return [_to_item(result).model_dump(exclude_none=True) for result in results]


def _to_item(result: SearchResult) -> QueryResultItem:
    return QueryResultItem(
        content=result.text,
        metadata=result.metadata or None,
        relevance_score=result.score,
    )


def _load_or_empty(path: Path, name: str, strict: bool) -> BM25Index:
    try:
        index = load_index(path)
    except IndexPersistenceError as e:
        if strict:
            raise
        logger.warning(f"Unable to load {name} index, serving an empty index instead: {e}")
        return BM25Index()

    logger.info(f"Loaded {name} index from {path}: {index.doc_count} documents")
    return index
