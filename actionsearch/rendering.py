"""
Result rendering interface.

The engine never draws anything itself. It hands full replacement lists of
results and suggestions to a ResultRenderer, and tells it to clear when a
new query starts. This module provides:
- The ResultRenderer protocol
- Silent, callback, recording and plain-text console implementations
- Caption and subtitle helpers shared by text front ends
"""

import sys
from typing import Callable, List, Optional, Protocol, Sequence

from .types import Action, Noun, ScoredAction, Suggestion

CAPTION_MARKER = '%'


class ResultRenderer(Protocol):
    """Protocol for result renderers.

    Implementations must provide render_results(), render_suggestions()
    and clear().
    """

    def render_results(self, results: Sequence[ScoredAction]) -> None:
        """
        Replace the displayed results.

        Args:
            results: Best results of the current query, highest score first
        """
        ...

    def render_suggestions(self, suggestions: Sequence[Suggestion]) -> None:
        """
        Replace the displayed suggestions.

        Args:
            suggestions: Current suggestions, highest score first
        """
        ...

    def clear(self) -> None:
        """Discard everything shown for the previous query."""
        ...


def compile_caption(action: Action, noun: Noun) -> str:
    """
    Fill an action's caption template with a noun.

    Example:
        >>> compile_caption(Action(("call",), ("contact",), "Call %"), Noun("contact", "Jane Doe"))
        'Call Jane Doe'
    """
    return action.caption.replace(CAPTION_MARKER, noun.serialized, 1)


def subtitle_for(match: ScoredAction) -> str:
    """
    Secondary line shown under a result.

    Parameterized actions show the trailing query text when there is any.
    Otherwise contacts show their phone number and other nouns their
    subtitle.
    """
    if match.action.parameterized and match.trailing_text:
        return match.trailing_text
    if match.input_type == 'contact':
        return match.input.get('tel', '') or ''
    return match.input.get('subtitle', '') or ''


class SilentRenderer:
    """
    Renderer that discards everything.

    Useful for headless use where callers read results off the aggregator.
    """

    def render_results(self, results: Sequence[ScoredAction]) -> None:
        """Do nothing."""
        pass

    def render_suggestions(self, suggestions: Sequence[Suggestion]) -> None:
        """Do nothing."""
        pass

    def clear(self) -> None:
        """Do nothing."""
        pass


class CallbackRenderer:
    """
    Renderer that forwards to user-provided callables.

    Example:
        renderer = CallbackRenderer(
            on_results=lambda results: view.show(results),
            on_clear=view.reset,
        )
    """

    def __init__(
        self,
        on_results: Optional[Callable[[List[ScoredAction]], None]] = None,
        on_suggestions: Optional[Callable[[List[Suggestion]], None]] = None,
        on_clear: Optional[Callable[[], None]] = None
    ):
        """
        Initialize callback renderer.

        Args:
            on_results: Called with the result list on every update
            on_suggestions: Called with the suggestion list on every update
            on_clear: Called on every start of query
        """
        self.on_results = on_results
        self.on_suggestions = on_suggestions
        self.on_clear = on_clear

    def render_results(self, results: Sequence[ScoredAction]) -> None:
        """Forward results to the callback."""
        if self.on_results:
            self.on_results(list(results))

    def render_suggestions(self, suggestions: Sequence[Suggestion]) -> None:
        """Forward suggestions to the callback."""
        if self.on_suggestions:
            self.on_suggestions(list(suggestions))

    def clear(self) -> None:
        """Forward the clear signal to the callback."""
        if self.on_clear:
            self.on_clear()


class RecordingRenderer:
    """
    Renderer that remembers what it was last told to show.

    Attributes:
        results: Last rendered results
        suggestions: Last rendered suggestions
        clear_count: Number of clear signals received
        events: Ordered log of ('results' | 'suggestions' | 'clear', payload)
    """

    def __init__(self):
        self.results: List[ScoredAction] = []
        self.suggestions: List[Suggestion] = []
        self.clear_count = 0
        self.events: List[tuple] = []

    def render_results(self, results: Sequence[ScoredAction]) -> None:
        """Record results."""
        self.results = list(results)
        self.events.append(('results', self.results))

    def render_suggestions(self, suggestions: Sequence[Suggestion]) -> None:
        """Record suggestions."""
        self.suggestions = list(suggestions)
        self.events.append(('suggestions', self.suggestions))

    def clear(self) -> None:
        """Forget everything shown so far."""
        self.results = []
        self.suggestions = []
        self.clear_count += 1
        self.events.append(('clear', None))


class ConsoleRenderer:
    """
    Plain-text renderer writing one block per update.

    Example output:
        1. Call Jane Doe  (+1 555 0100)  [phone 1.50]
        2. Message Jane Doe  (+1 555 0100)  [messages 0.50]
    """

    def __init__(self, file=None, show_scores: bool = True):
        """
        Initialize console renderer.

        Args:
            file: Output file (default: sys.stdout)
            show_scores: Append app id and score to each line
        """
        self.file = file or sys.stdout
        self.show_scores = show_scores

    def render_results(self, results: Sequence[ScoredAction]) -> None:
        """Print the result list."""
        for rank, match in enumerate(results, 1):
            line = f"{rank:>2}. {compile_caption(match.action, match.input)}"
            subtitle = subtitle_for(match)
            if subtitle:
                line += f"  ({subtitle})"
            if self.show_scores:
                line += f"  [{match.app.id} {match.score:.2f}]"
            self.file.write(line + "\n")
        self.file.flush()

    def render_suggestions(self, suggestions: Sequence[Suggestion]) -> None:
        """Print the suggestions on one line."""
        names = ", ".join(s.serialized_noun for s in suggestions)
        self.file.write(f"    suggestions: {names}\n")
        self.file.flush()

    def clear(self) -> None:
        """Print a separator marking the start of a new query."""
        self.file.write("-" * 40 + "\n")
        self.file.flush()
