"""
Tokenizer for BM25 text processing.

Tokenization pipeline:
1. Lowercase conversion
2. Extract maximal runs of ASCII letters a-z
3. Return list of tokens in document order

Everything else (digits, punctuation, whitespace, non-ASCII letters) is a
delimiter and never appears inside a token. There is no stemming and no
stopword filtering: the knowledge snippets are short, and exact surface forms
("build", "builds") are kept apart on purpose.
"""

import re
from typing import List

_TOKEN_RE = re.compile(r'[a-z]+')


def tokenize(text: str) -> List[str]:
    """
    Tokenize text for BM25 indexing and querying.

    Args:
        text: Input text to tokenize

    Returns:
        List of lowercase tokens (duplicates preserved, in order)

    Examples:
        >>> tokenize("Cloud-Build v2.0!")
        ['cloud', 'build', 'v']

        >>> tokenize("gcloud run deploy --image=gcr.io/app")
        ['gcloud', 'run', 'deploy', 'image', 'gcr', 'io', 'app']

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    # str.lower() can map non-ASCII characters onto ASCII ones
    # (e.g. "K" KELVIN SIGN -> "k"), which then count as letters.
    return _TOKEN_RE.findall(text.lower())
