"""
Binary persistence for BM25 indices.

Format (private, versionless):
    gzip( UTF-8 JSON {
        "documents":            [{"id": 1, "content": "...", "metadata": {...}}, ...],
        "doc_lengths":          {"1": 42, ...},
        "term_frequencies":     {"1": {"cloud": 3, ...}, ...},
        "document_frequencies": {"cloud": 7, ...},
        "avg_doc_length":       37.25,
        "doc_count":            12
    } )

JSON object keys are strings, so document ids are restored to int on load.
Floats are written with Python's shortest round-trip repr, so avg_doc_length
comes back bit-exact and restored indices score identically to the original.

Postings and the id -> document map are derived data and are rebuilt by
BM25Index.from_state() instead of being stored.
"""

import gzip
import json
import logging
import math
import zlib
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import IndexDecodeError, IndexIOError
from .index import BM25Index, Document

logger = logging.getLogger(__name__)


class _DocumentRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    content: str
    metadata: Optional[Dict[str, str]] = None


class _IndexSnapshot(BaseModel):
    """Validated shape of a decoded index payload"""
    model_config = ConfigDict(extra="forbid")

    documents: List[_DocumentRecord]
    doc_lengths: Dict[int, int]
    term_frequencies: Dict[int, Dict[str, int]]
    document_frequencies: Dict[str, int]
    avg_doc_length: float
    doc_count: int


def serialize(index: BM25Index) -> bytes:
    """
    Encode the full index state to bytes.

    Args:
        index: Index to encode

    Returns:
        Compressed binary payload (deterministic for a given index)
    """
    payload = {
        "documents": [
            _document_to_dict(document) for document in index.documents
        ],
        "doc_lengths": {str(doc_id): length for doc_id, length in index.doc_lengths.items()},
        "term_frequencies": {
            str(doc_id): tf for doc_id, tf in index.term_frequencies.items()
        },
        "document_frequencies": index.document_frequencies,
        "avg_doc_length": index.avg_doc_length,
        "doc_count": index.doc_count,
    }
    raw = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    # mtime=0 keeps the output byte-identical across builds
    return gzip.compress(raw, mtime=0)


def deserialize(data: bytes) -> BM25Index:
    """
    Decode bytes produced by serialize() back into a queryable index.

    Args:
        data: Binary payload

    Returns:
        Restored BM25Index

    Raises:
        IndexDecodeError: If the payload is corrupt, truncated, not an index,
            or its statistics are inconsistent
    """
    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise IndexDecodeError(f"Index payload is not a valid compressed stream: {e}") from e

    try:
        decoded = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise IndexDecodeError(f"Index payload is not valid JSON: {e}") from e

    if not isinstance(decoded, dict):
        raise IndexDecodeError(f"Index payload must be a JSON object, got {type(decoded).__name__}")

    try:
        snapshot = _IndexSnapshot.model_validate(decoded)
    except ValidationError as e:
        raise IndexDecodeError(f"Index payload has invalid structure: {e}") from e

    _check_consistency(snapshot)

    documents = [
        Document(id=record.id, content=record.content, metadata=record.metadata or None)
        for record in snapshot.documents
    ]
    return BM25Index.from_state(
        documents=documents,
        doc_lengths=snapshot.doc_lengths,
        term_frequencies=snapshot.term_frequencies,
        document_frequencies=snapshot.document_frequencies,
        avg_doc_length=snapshot.avg_doc_length,
    )


def save_index(index: BM25Index, path: Union[str, Path]) -> None:
    """
    Serialize an index to a file (parent directories are created).

    Raises:
        IndexIOError: If the file cannot be written
    """
    path = Path(path)
    data = serialize(index)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise IndexIOError(f"Failed to write index to {path}: {e}", path=path) from e

    logger.debug(f"Saved index to {path}: {index.doc_count} documents, {len(data)} bytes")


def load_index(path: Union[str, Path]) -> BM25Index:
    """
    Load an index previously written by save_index().

    Raises:
        IndexIOError: If the file is missing or unreadable
        IndexDecodeError: If the file content is not a valid index
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise IndexIOError(f"Failed to read index from {path}: {e}", path=path) from e

    try:
        index = deserialize(data)
    except IndexDecodeError as e:
        raise IndexDecodeError(f"{path}: {e}", path=path) from e

    logger.debug(f"Loaded index from {path}: {index.doc_count} documents, {len(data)} bytes")
    return index


def _document_to_dict(document: Document) -> dict:
    record = {"id": document.id, "content": document.content}
    if document.metadata:
        record["metadata"] = document.metadata
    return record


def _check_consistency(snapshot: _IndexSnapshot) -> None:
    """Reject payloads whose statistics contradict the stored documents"""
    ids = [record.id for record in snapshot.documents]
    id_set = set(ids)

    if len(id_set) != len(ids):
        raise IndexDecodeError("Index payload contains duplicate document ids")
    if snapshot.doc_count != len(ids):
        raise IndexDecodeError(
            f"Index payload doc_count={snapshot.doc_count} but {len(ids)} documents stored"
        )
    if set(snapshot.doc_lengths) != id_set:
        raise IndexDecodeError("Index payload doc_lengths do not match stored documents")
    if set(snapshot.term_frequencies) != id_set:
        raise IndexDecodeError("Index payload term_frequencies do not match stored documents")

    document_frequencies: Counter = Counter()
    for doc_id, tf in snapshot.term_frequencies.items():
        if any(count < 0 for count in tf.values()):
            raise IndexDecodeError(f"Index payload has negative term frequency for document {doc_id}")
        if sum(tf.values()) != snapshot.doc_lengths[doc_id]:
            raise IndexDecodeError(f"Index payload length of document {doc_id} does not match its terms")
        document_frequencies.update(term for term, count in tf.items() if count > 0)

    if dict(document_frequencies) != snapshot.document_frequencies:
        raise IndexDecodeError("Index payload document_frequencies do not match term_frequencies")

    # Encoder divides the same integer total, so equality is exact
    if not math.isfinite(snapshot.avg_doc_length):
        raise IndexDecodeError(f"Index payload avg_doc_length={snapshot.avg_doc_length} is not finite")
    expected = sum(snapshot.doc_lengths.values()) / snapshot.doc_count if snapshot.doc_count else 0.0
    if snapshot.avg_doc_length != expected:
        raise IndexDecodeError(
            f"Index payload avg_doc_length={snapshot.avg_doc_length} does not match document lengths ({expected})"
        )
