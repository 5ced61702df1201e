"""Errors raised when persisting or restoring a BM25 index"""

from pathlib import Path
from typing import Optional, Union


class IndexPersistenceError(Exception):
    """Base class for index save/load failures"""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class IndexIOError(IndexPersistenceError):
    """Index file could not be read or written (missing, permission denied, ...)"""


class IndexDecodeError(IndexPersistenceError):
    """Index bytes are corrupt, truncated, or structurally invalid"""
