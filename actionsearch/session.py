"""
Query Session Controller
========================

Drives the engine from a live sequence of raw queries.

For every submitted query the controller:

1. Drops it if it equals the previous submission.
2. Tokenizes it.
3. Starts a new generation on the aggregator, which supersedes whatever
   the previous query is still producing and, where something may be on
   screen, fires the clear signal.
4. Interprets the terms and pumps the resulting ScoredAction stream into
   the aggregator from a background task.

An empty query only does step 3. Superseded pumps notice on their next
match (the aggregator refuses it) and stop.

Example:
    async def main():
        controller = QuerySessionController.from_catalog(
            load_default_catalog(), renderer=ConsoleRenderer()
        )
        controller.submit("call ja")
        controller.submit("call jane")
        await controller.settle()

    asyncio.run(main())
"""

import asyncio
import contextlib
import logging
from typing import AsyncIterable, List, Optional

from .aggregator import RankingAggregator
from .catalog import Catalog
from .config import ActionSearchConfig
from .errors import InvariantViolation
from .interpreter import QueryInterpreter, ResultSet
from .observability import MetricsCollector, timed
from .rendering import ResultRenderer
from .streams import drop_repeats
from .tokenizer import Tokenizer, normalize_query
from .types import Suggestion

logger = logging.getLogger(__name__)


def _consume_exception(task: asyncio.Task) -> None:
    # Superseded queries are never awaited; their errors live in .errors
    if not task.cancelled():
        task.exception()


class QuerySessionController:
    """
    Owns the query lifecycle: duplicate suppression, generations, clearing
    and cancellation of superseded work.

    Attributes:
        interpreter: Produces the candidate streams for a term sequence
        aggregator: Ranks the active query's candidates
        tokenizer: Splits raw queries into terms
        errors: InvariantViolations raised by finished queries, oldest first
    """

    def __init__(
        self,
        interpreter: QueryInterpreter,
        aggregator: RankingAggregator,
        tokenizer: Optional[Tokenizer] = None,
        config: Optional[ActionSearchConfig] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        self.interpreter = interpreter
        self.aggregator = aggregator
        self.tokenizer = tokenizer or Tokenizer()
        self.config = config or ActionSearchConfig()
        self._metrics = metrics
        self.errors: List[InvariantViolation] = []

        self._generation = aggregator.generation
        self._last_query: Optional[str] = None
        self._active = False
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_catalog(
        cls,
        catalog: Catalog,
        renderer: Optional[ResultRenderer] = None,
        config: Optional[ActionSearchConfig] = None
    ) -> 'QuerySessionController':
        """
        Wire up an interpreter, aggregator and controller for a catalog.

        Args:
            catalog: App/noun catalog to search
            renderer: Receives results, suggestions and clear signals
            config: Engine configuration (default: ActionSearchConfig())

        Returns:
            Ready-to-use controller
        """
        config = config or ActionSearchConfig()
        metrics = MetricsCollector() if config.enable_metrics else None
        return cls(
            interpreter=QueryInterpreter(catalog.index(), config=config),
            aggregator=RankingAggregator(renderer=renderer, config=config, metrics=metrics),
            config=config,
            metrics=metrics,
        )

    @property
    def metrics(self) -> Optional[MetricsCollector]:
        """The metrics collector, if metrics are enabled."""
        return self._metrics

    @property
    def generation(self) -> int:
        """Generation of the most recently started query."""
        return self._generation

    @property
    def last_query(self) -> Optional[str]:
        """The last query that was not suppressed as a duplicate."""
        return self._last_query

    def submit(self, raw: Optional[str]) -> Optional[asyncio.Task]:
        """
        Start processing a raw query.

        Must be called from within a running event loop.

        Args:
            raw: The query as typed

        Returns:
            The task pumping the query's matches, or None if the query was
            empty or a repeat of the previous one
        """
        query = normalize_query(raw)
        if query == self._last_query:
            logger.debug(f"Ignoring repeated query {query!r}")
            self._count('duplicate_queries')
            return None
        self._last_query = query

        terms = self.tokenizer.tokenize(query)
        self._generation += 1
        generation = self._generation

        if not terms:
            self.aggregator.reset(generation, clear=True)
            self._active = False
            self._task = None
            return None

        # From idle there is nothing on screen to clear
        self.aggregator.reset(generation, clear=self._active)
        self._active = True

        result_set = self.interpreter.interpret(terms)
        logger.debug(f"Query {generation}: {query!r} -> {terms}")
        self._task = asyncio.ensure_future(self._pump(generation, result_set))
        self._task.add_done_callback(_consume_exception)
        return self._task

    @timed('query')
    async def _pump(self, generation: int, result_set: ResultSet) -> int:
        """
        Feed one query's matches into the aggregator.

        Returns:
            Number of matches accepted before the stream ended or the query
            was superseded
        """
        accepted = 0
        try:
            async with contextlib.aclosing(result_set.actions) as actions:
                async for action in actions:
                    if not self.aggregator.accept(generation, action):
                        logger.debug(f"Query {generation} superseded after {accepted} matches")
                        break
                    accepted += 1
        except InvariantViolation as e:
            logger.exception(f"Query {generation} aborted: {e.message}")
            self._count('invariant_violations')
            self.errors.append(e)
            raise
        return accepted

    async def settle(self) -> int:
        """
        Wait for the current query to finish.

        Returns:
            Number of matches accepted for it (0 if there is no query)

        Raises:
            InvariantViolation: If the query was aborted by one
        """
        task = self._task
        if task is None:
            return 0
        return await task

    def select_suggestion(self, suggestion: Suggestion) -> Optional[asyncio.Task]:
        """
        Use a suggestion as the next query.

        The suggested noun replaces whatever was typed, exactly as if the
        user had typed it.
        """
        return self.submit(suggestion.serialized_noun)

    async def run(self, queries: AsyncIterable[str]) -> None:
        """
        Process a live sequence of raw queries until it ends.

        Consecutive repeats are dropped before they reach submit(). Each
        query supersedes the previous one without waiting for it; the last
        one is awaited before returning.

        Raises:
            InvariantViolation: If the last query was aborted by one
        """
        async for raw in drop_repeats(queries, key=normalize_query):
            self.submit(raw)
            # Let the new pump start before the next query arrives
            await asyncio.sleep(0)
        await self.settle()

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.record_count(name)
