"""
Fuzzy Matcher
=============

Regex-based fuzzy matching of query terms against catalog text.

A pattern is built from query terms joined by a separator that accepts the
rest of the current word plus whitespace, so "ja do" matches "Jane Doe" and
a half-typed final word still matches as a prefix. Matching is a regex
search of the pattern against `accessor(item)` for every corpus item;
items that do not match are dropped.

Scoring:
    score = len(matched text) / len(accessor value)

A match covering the whole value scores 1.0; a short match inside a long
value scores close to 0. An empty pattern matches every item with score 0.
"""

import re
from functools import lru_cache
from typing import Callable, Iterable, Iterator, Pattern, Sequence, TypeVar

from .errors import MatchProviderFailure
from .types import Match

T = TypeVar('T')

# Rest of the current word
TERM_SUFFIX = r'\S*'

# Rest of the current word, then the gap before the next one
TERM_SEPARATOR = TERM_SUFFIX + r'\s+'


def escape_terms(terms: Iterable[str]) -> list:
    """Regex-escape each term so punctuation in a query is matched literally."""
    return [re.escape(term) for term in terms]


def join_terms(terms: Sequence[str]) -> str:
    """
    Join terms with the fuzzy inter-term separator.

    ["ja", "do"] becomes a pattern matching "Jane Doe" and "jam doughnut".
    """
    return TERM_SEPARATOR.join(escape_terms(terms))


def prefix_pattern(term: str) -> str:
    """Pattern matching values that start with term."""
    return '^' + re.escape(term)


def leading_noun_pattern(terms: Sequence[str], lookahead: int = 2) -> str:
    """
    Noun pattern for a query whose first term is the verb.

    The noun is taken to be the next one or two terms: terms[1], optionally
    followed by terms[2]. With a single term there is no noun text and the
    pattern is empty, which matches every noun.

    Args:
        terms: Full term sequence, verb first
        lookahead: Maximum number of noun terms (1 or 2)

    Returns:
        Regex pattern string
    """
    if len(terms) < 2:
        return ''
    pattern = re.escape(terms[1]) + TERM_SUFFIX
    if lookahead > 1 and len(terms) > 2:
        pattern += r'(?:\s+' + re.escape(terms[2]) + TERM_SUFFIX + ')?'
    return pattern


@lru_cache(maxsize=512)
def _compile(pattern: str, flags: int) -> Pattern:
    return re.compile(pattern, flags)


class FuzzyMatcher:
    """
    Filters and scores a corpus against a pattern.

    Example:
        matcher = FuzzyMatcher()
        for m in matcher.match("jane", nouns, lambda n: n.serialized):
            print(m.item, m.score, m.matched_text)
    """

    def __init__(self, case_sensitive: bool = False):
        """
        Initialize matcher.

        Args:
            case_sensitive: Match case exactly (default False)
        """
        self.case_sensitive = case_sensitive
        self._flags = 0 if case_sensitive else re.IGNORECASE

    def compile(self, pattern: str) -> Pattern:
        """
        Compile a pattern with this matcher's flags.

        Raises:
            MatchProviderFailure: If the pattern is not a valid regex
        """
        try:
            return _compile(pattern, self._flags)
        except re.error as e:
            raise MatchProviderFailure(
                f"Invalid match pattern: {e}", pattern=pattern
            ) from e

    def match(
        self,
        pattern: str,
        corpus: Iterable[T],
        accessor: Callable[[T], str]
    ) -> Iterator[Match[T]]:
        """
        Match a pattern against every item of a corpus.

        The pattern is compiled immediately; items are scanned lazily.

        Args:
            pattern: Regex pattern (see join_terms / prefix_pattern)
            corpus: Items to match
            accessor: Returns the text to match for an item

        Returns:
            Iterator of Match for items whose text matches

        Raises:
            MatchProviderFailure: If the pattern does not compile, or (during
                iteration) the accessor fails or returns a non-string
        """
        regex = self.compile(pattern)
        return self._scan(regex, corpus, accessor)

    def _scan(
        self,
        regex: Pattern,
        corpus: Iterable[T],
        accessor: Callable[[T], str]
    ) -> Iterator[Match[T]]:
        for item in corpus:
            try:
                text = accessor(item)
            except Exception as e:
                raise MatchProviderFailure(
                    f"Accessor failed: {e}", pattern=regex.pattern
                ) from e
            if not isinstance(text, str):
                raise MatchProviderFailure(
                    f"Accessor returned {type(text).__name__}, expected str",
                    pattern=regex.pattern
                )

            found = regex.search(text)
            if found is None:
                continue

            captures = (found.group(0),) + tuple(g or '' for g in found.groups())
            yield Match(item=item, score=self.score(found.group(0), text), captures=captures)

    @staticmethod
    def score(matched: str, text: str) -> float:
        """
        Score a match by how much of the text it covers.

        Args:
            matched: The matched substring
            text: The full accessor value

        Returns:
            Coverage in [0, 1]
        """
        if not text:
            return 0.0
        return len(matched) / len(text)

