"""
Ranking Aggregator
==================

Incrementally ranks the candidate stream of the active query.

Each accepted ScoredAction is inserted into a bounded list kept in
descending score order, and may displace one of the suggestions. The
renderer is handed a fresh copy of the best results and of the
suggestions after every change, never a diff.

Every query gets its own QuerySession tagged with a generation number.
Starting a new generation supersedes the old session: anything still
arriving for it is dropped without touching the new session.
"""

import bisect
import logging
import threading
from typing import List, Optional, Tuple

from .config import ActionSearchConfig
from .observability import MetricsCollector
from .rendering import ResultRenderer, SilentRenderer
from .types import ScoredAction, Suggestion

logger = logging.getLogger(__name__)


class QuerySession:
    """
    Live ranking state for one query.

    Attributes:
        generation: Generation tag of the query this session belongs to
        superseded: Set once a newer query has replaced this one
        suggestions: Best distinct nouns, highest score first
    """

    def __init__(self, generation: int, max_results: int):
        self.generation = generation
        self.max_results = max_results
        self.superseded = False
        self.suggestions: List[Suggestion] = []
        # Parallel lists ordered by (-score, arrival)
        self._keys: List[Tuple[float, int]] = []
        self._results: List[ScoredAction] = []
        self._arrivals = 0

    def __len__(self) -> int:
        return len(self._results)

    @property
    def top_results(self) -> List[ScoredAction]:
        """Retained results, highest score first."""
        return list(self._results)

    def insert(self, action: ScoredAction) -> Optional[int]:
        """
        Insert an action by score.

        Equal scores keep arrival order. When the session is full the lowest
        result is dropped, which may be the new action itself.

        Returns:
            Rank the action was inserted at, or None if it was not retained
        """
        key = (-action.score, self._arrivals)
        self._arrivals += 1
        position = bisect.bisect_right(self._keys, key)
        if position >= self.max_results:
            return None
        self._keys.insert(position, key)
        self._results.insert(position, action)
        if len(self._results) > self.max_results:
            self._keys.pop()
            self._results.pop()
        return position

    def within_top(self, score: float, k: int) -> bool:
        """True if score ties or beats the k-th best retained score."""
        if len(self._results) <= k:
            return True
        return score >= self._results[k - 1].score

    def offer_suggestion(self, suggestion: Suggestion, capacity: int) -> bool:
        """
        Offer a noun as an auto-completion suggestion.

        A noun already suggested is only replaced by a higher score. A score
        equal to an existing one goes in front of it, so the newest of
        equally good suggestions comes first.

        Returns:
            True if the suggestion list changed
        """
        changed = False
        for i, existing in enumerate(self.suggestions):
            if existing.serialized_noun == suggestion.serialized_noun:
                if suggestion.score <= existing.score:
                    return False
                del self.suggestions[i]
                changed = True
                break

        position = 0
        while position < len(self.suggestions) and self.suggestions[position].score > suggestion.score:
            position += 1
        if position < capacity:
            self.suggestions.insert(position, suggestion)
            del self.suggestions[capacity:]
            changed = True
        return changed


class RankingAggregator:
    """
    Maintains the ranked results and suggestions of the active query.

    Insertions, resets and the renderer calls they trigger are serialized
    with a lock, so matches may be fed from worker threads as well as from
    the event loop, and nothing from an old query reaches the renderer
    after its clear signal.

    Example:
        aggregator = RankingAggregator(renderer=RecordingRenderer())
        aggregator.reset(1)
        aggregator.accept(1, scored_action)
        aggregator.rendered_results  # best 20, highest first
    """

    def __init__(
        self,
        renderer: Optional[ResultRenderer] = None,
        config: Optional[ActionSearchConfig] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize aggregator.

        Args:
            renderer: Receives results, suggestions and clear signals
            config: Engine configuration (default: ActionSearchConfig())
            metrics: Optional metrics collector
        """
        self.config = config or ActionSearchConfig()
        self.renderer = renderer or SilentRenderer()
        self._metrics = metrics
        self._lock = threading.RLock()
        self.session = QuerySession(0, self.config.max_results_retained)

    @property
    def generation(self) -> int:
        """Generation of the active session."""
        return self.session.generation

    @property
    def top_results(self) -> List[ScoredAction]:
        """Every retained result of the active session, highest first."""
        return self.session.top_results

    @property
    def rendered_results(self) -> List[ScoredAction]:
        """The slice of top_results handed to the renderer."""
        return self.session.top_results[:self.config.max_results_rendered]

    @property
    def top_suggestions(self) -> List[Suggestion]:
        """Current suggestions, highest first."""
        return list(self.session.suggestions)

    def reset(self, generation: int, clear: bool = True) -> QuerySession:
        """
        Start a new session, discarding all results and suggestions.

        Args:
            generation: Generation tag for the new session
            clear: Tell the renderer to discard what it shows

        Returns:
            The new, empty session
        """
        with self._lock:
            self.session.superseded = True
            self.session = QuerySession(generation, self.config.max_results_retained)
            logger.debug(f"Reset to generation {generation} (clear={clear})")
            self._count('resets')
            if clear:
                self.renderer.clear()
            return self.session

    def accept(self, generation: int, action: ScoredAction) -> bool:
        """
        Rank one candidate action.

        Args:
            generation: Generation tag of the query that produced it
            action: The candidate

        Returns:
            False if the action belongs to a superseded query and was dropped
        """
        with self._lock:
            session = self.session
            if generation != session.generation:
                logger.debug(f"Dropped stale action from generation {generation}")
                self._count('stale_actions_dropped')
                return False

            self._count('actions_accepted')
            rank = session.insert(action)
            if rank is None:
                return True

            if rank < self.config.max_results_rendered:
                self.renderer.render_results(self.rendered_results)

            k = self.config.max_suggestions
            if session.within_top(action.score, k):
                if session.offer_suggestion(Suggestion.from_action(action), k):
                    self.renderer.render_suggestions(self.top_suggestions)
            return True

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.record_count(name)
