"""
Tokenizer Module
================

Turns a raw query string into the term sequence the interpreter works on.

Queries are typed one character at a time, so the tokenizer does no
stemming and no stop word filtering: every whitespace-separated fragment
counts, including a half-typed final word.
"""

import re
from typing import List

_WHITESPACE = re.compile(r'\s+')


def normalize_query(raw: str) -> str:
    """
    Strip surrounding whitespace from a raw query.

    Repeat suppression compares normalized queries, so "call " and "call"
    are the same query.

    Args:
        raw: Query as typed or selected

    Returns:
        The query without leading/trailing whitespace
    """
    if raw is None:
        return ''
    return raw.strip()


class Tokenizer:
    """
    Whitespace tokenizer producing lowercase terms.

    Example:
        tokenizer = Tokenizer()
        tokenizer.tokenize("  Call Jane  ")
        # ['call', 'jane']
        tokenizer.tokenize("")
        # []
    """

    def __init__(self, lowercase: bool = True):
        """
        Initialize tokenizer.

        Args:
            lowercase: Lowercase every term (default True)
        """
        self.lowercase = lowercase

    def tokenize(self, raw: str) -> List[str]:
        """
        Split a query into terms.

        Args:
            raw: Raw query text

        Returns:
            Ordered list of terms; empty for an empty or blank query
        """
        text = normalize_query(raw)
        if not text:
            return []
        if self.lowercase:
            text = text.lower()
        return _WHITESPACE.split(text)
