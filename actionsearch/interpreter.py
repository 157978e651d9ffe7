"""
Query Interpreter
=================

Turns a term sequence into a stream of scored candidate actions.

Two strategies run side by side for every query:

Verb-first:
    Every term is matched as a prefix of every known verb. Where the verb
    sits in the query decides where the noun is looked for:

    - "call jane doe": verb first, the noun is the next one or two terms
    - "jane call hi": noun terms precede the verb, the rest is trailing text

    The noun pattern is then matched against the corpus of the action's
    noun type. Score = verb score + noun score.

Noun-first:
    All terms together are matched against every noun of every type, and
    each matching noun is offered to every action accepting its type.
    Score = noun score.

The two streams are merged in arrival order. The noun-first noun matches
are also exposed on their own as the suggestion source.
"""

import logging
from dataclasses import dataclass
from operator import attrgetter
from typing import AsyncIterator, Callable, Iterable, Iterator, List, Optional, Sequence

from .catalog import CatalogIndex
from .config import ActionSearchConfig
from .errors import InvariantViolation, MatchProviderFailure
from .fuzzy import FuzzyMatcher, join_terms, leading_noun_pattern, prefix_pattern
from .streams import defer, expand, from_iterable, merge
from .types import Match, NounEntry, ScoredAction, VerbEntry

logger = logging.getLogger(__name__)

verb_name = attrgetter('name')
noun_text = attrgetter('serialized')
entry_noun_text = attrgetter('noun.serialized')


@dataclass
class ResultSet:
    """
    The candidate streams for one query.

    Attributes:
        terms: The term sequence that was interpreted
        actions: Merged verb-first and noun-first ScoredAction stream
        suggestions: Noun-first noun matches, independent of any action
    """
    terms: Sequence[str]
    actions: AsyncIterator[ScoredAction]
    suggestions: AsyncIterator[Match[NounEntry]]


class NounMatches:
    """
    Noun-first matches for one query.

    The corpus is scanned when the first stream built from this object is
    first iterated. Every stream replays that single scan, so the action
    expansion and the suggestions see the same matches.
    """

    def __init__(self, scan: Callable[[], List[Match[NounEntry]]]):
        self._scan = scan
        self._matches: Optional[List[Match[NounEntry]]] = None

    @property
    def scanned(self) -> bool:
        return self._matches is not None

    def __call__(self) -> List[Match[NounEntry]]:
        if self._matches is None:
            self._matches = self._scan()
        return self._matches

    def stream(self) -> AsyncIterator[Match[NounEntry]]:
        """A new stream over the matches."""
        return defer(self)


def derive_trailing_text(terms: Sequence[str], matched_noun: str) -> Optional[str]:
    """
    Work out the text following the noun in a verb-first query.

    The matched noun text tells how many words the noun used up; those
    words plus the one-word verb are skipped and the rest is the trailing
    text.

    Args:
        terms: Full term sequence, verb first
        matched_noun: Literal noun text the pattern matched

    Returns:
        Trailing text (possibly empty), or None if nothing was matched
    """
    noun = matched_noun.strip()
    if not noun:
        return None
    word_count = len(noun.split())
    return ' '.join(terms[word_count + 1:])


class QueryInterpreter:
    """
    Runs the verb-first and noun-first strategies over a catalog index.

    Example:
        interpreter = QueryInterpreter(catalog.index())
        result_set = interpreter.interpret(["call", "jane"])
        actions = await collect(result_set.actions)
    """

    def __init__(
        self,
        index: CatalogIndex,
        matcher: Optional[FuzzyMatcher] = None,
        config: Optional[ActionSearchConfig] = None
    ):
        """
        Initialize interpreter.

        Args:
            index: Catalog indices to search
            matcher: Fuzzy matcher (default: one built from config)
            config: Engine configuration (default: ActionSearchConfig())
        """
        self.index = index
        self.config = config or ActionSearchConfig()
        self.matcher = matcher or FuzzyMatcher(case_sensitive=self.config.case_sensitive)

    def interpret(self, terms: Sequence[str]) -> ResultSet:
        """
        Build the candidate streams for a query.

        Nothing is matched until the returned streams are consumed.

        Args:
            terms: Non-empty term sequence

        Returns:
            ResultSet with merged actions and raw noun suggestions

        Raises:
            ValueError: If terms is empty
        """
        if not terms:
            raise ValueError("terms must not be empty")
        terms = list(terms)
        logger.debug(f"Interpreting terms={terms}")

        noun_matches = self.noun_matches(terms)
        return ResultSet(
            terms=terms,
            actions=merge([self.search_with_verb(terms), self.search_with_noun(noun_matches)]),
            suggestions=noun_matches.stream(),
        )

    def _grep(self, pattern: str, corpus: Iterable, accessor: Callable) -> List[Match]:
        """Run the matcher, treating a matcher failure as no matches."""
        try:
            return list(self.matcher.match(pattern, corpus, accessor))
        except MatchProviderFailure as e:
            logger.warning(f"Match failed for pattern {pattern!r}: {e.message}")
            return []

    # -------------------------------------------------------------------------
    # Verb-first
    # -------------------------------------------------------------------------

    def verb_matches(self, terms: Sequence[str]) -> AsyncIterator[Match[VerbEntry]]:
        """Stream of verbs that some term is a prefix of."""
        return expand(
            from_iterable(terms),
            lambda term: self._grep(prefix_pattern(term), self.index.verbs, verb_name)
        )

    def search_with_verb(self, terms: Sequence[str]) -> AsyncIterator[ScoredAction]:
        """Verb-first strategy."""
        return expand(
            self.verb_matches(terms),
            lambda verb_match: self._actions_for_verb(terms, verb_match)
        )

    def _verb_position(self, terms: Sequence[str], verb_match: Match[VerbEntry]) -> int:
        capture = verb_match.matched_text
        haystack = list(terms)
        if not self.config.case_sensitive:
            capture = capture.lower()
            haystack = [term.lower() for term in terms]
        try:
            return haystack.index(capture)
        except ValueError:
            raise InvariantViolation(
                "Matched verb text is not one of the query terms",
                terms=list(terms), capture=verb_match.matched_text,
                verb=verb_match.item.name
            ) from None

    def _actions_for_verb(
        self,
        terms: Sequence[str],
        verb_match: Match[VerbEntry]
    ) -> Iterator[ScoredAction]:
        entry = verb_match.item
        position = self._verb_position(terms, verb_match)

        trailing_text: Optional[str] = None
        if position == 0:
            noun_pattern = leading_noun_pattern(terms, self.config.noun_lookahead)
        else:
            noun_pattern = join_terms(terms[:position])
            trailing_text = ' '.join(terms[position + 1:])

        # Multi-param actions are only ever matched on their first param
        noun_type = entry.action.input_type
        if noun_type is None:
            return

        corpus = self.index.nouns_of_type(noun_type)
        for noun_match in self._grep(noun_pattern, corpus, noun_text):
            text = trailing_text
            if text is None:
                text = derive_trailing_text(terms, noun_match.matched_text)
            yield ScoredAction(
                app=entry.app,
                action=entry.action,
                input=noun_match.item,
                input_type=noun_type,
                score=verb_match.score + noun_match.score,
                trailing_text=text,
            )

    # -------------------------------------------------------------------------
    # Noun-first
    # -------------------------------------------------------------------------

    def noun_matches(self, terms: Sequence[str]) -> NounMatches:
        """Nouns of any type matching all terms, scanned on first use."""
        pattern = join_terms(terms)
        return NounMatches(lambda: self._grep(pattern, self.index.nouns, entry_noun_text))

    def search_with_noun(self, noun_matches: NounMatches) -> AsyncIterator[ScoredAction]:
        """Noun-first strategy."""
        return expand(noun_matches.stream(), self._actions_for_noun)

    def _actions_for_noun(self, noun_match: Match[NounEntry]) -> Iterator[ScoredAction]:
        noun_entry = noun_match.item
        for entry in self.index.actions_for_type(noun_entry.type):
            if entry.action.input_type != noun_entry.type:
                # Bound through a secondary param, never matched on
                continue
            yield ScoredAction(
                app=entry.app,
                action=entry.action,
                input=noun_entry.noun,
                input_type=noun_entry.type,
                score=noun_match.score,
            )
