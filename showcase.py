"""
Action Search Showcase
======================

Types a handful of queries into the engine one character at a time, the
way a search box would see them, and prints what gets rendered.

Usage:
    python showcase.py                      # built-in queries
    python showcase.py "call jane" "radio"  # your own queries
"""

import asyncio
import logging
import sys
from typing import List

from actionsearch import (
    ActionSearchConfig,
    ConsoleRenderer,
    QuerySessionController,
    load_default_catalog,
)
from actionsearch.streams import from_iterable

DEFAULT_QUERIES = [
    "call jane",
    "jane call",
    "text jane doe running late",
    "radiohead",
    "play pink",
]


def print_header(title: str, char: str = "="):
    """Print a formatted section header."""
    width = 70
    print(f"\n{char * width}")
    print(f"{title:^{width}}")
    print(f"{char * width}\n")


def keystrokes(query: str) -> List[str]:
    """Every prefix of a query, as typed."""
    return [query[:i] for i in range(1, len(query) + 1)]


class FinalResultRenderer(ConsoleRenderer):
    """Console renderer that only prints once a query has settled."""

    def __init__(self):
        super().__init__()
        self.pending = []
        self.suggestions = []

    def render_results(self, results):
        self.pending = list(results)

    def render_suggestions(self, suggestions):
        self.suggestions = list(suggestions)

    def clear(self):
        self.pending = []
        self.suggestions = []

    def flush(self):
        if not self.pending:
            print("    (no results)")
            return
        super().render_results(self.pending[:5])
        super().render_suggestions(self.suggestions)


async def showcase(queries: List[str]) -> None:
    catalog = load_default_catalog()
    print(f"Loaded {catalog!r}")

    renderer = FinalResultRenderer()
    controller = QuerySessionController.from_catalog(
        catalog, renderer=renderer, config=ActionSearchConfig(enable_metrics=True)
    )

    for query in queries:
        print_header(f'"{query}"', "-")
        await controller.run(from_iterable(keystrokes(query)))
        renderer.flush()

    print_header("Metrics")
    print(controller.metrics.get_summary())


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    print_header("ACTION SEARCH SHOWCASE")
    queries = sys.argv[1:] or DEFAULT_QUERIES
    asyncio.run(showcase(queries))


if __name__ == "__main__":
    main()
