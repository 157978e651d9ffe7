"""
Action Search Package
=====================

Incremental natural-language action search: type "call jane" and get back
a ranked list of app actions bound to matching nouns, refreshed as the
query changes.

Example:
    import asyncio
    from actionsearch import ConsoleRenderer, QuerySessionController, load_default_catalog

    async def main():
        controller = QuerySessionController.from_catalog(
            load_default_catalog(), renderer=ConsoleRenderer()
        )
        controller.submit("call jane")
        await controller.settle()

    asyncio.run(main())
"""

from .types import (
    Action,
    App,
    Noun,
    NounEntry,
    TypeEntry,
    VerbEntry,
    Match,
    ScoredAction,
    Suggestion,
)
from .config import ActionSearchConfig, get_default_config
from .errors import ActionSearchError, CatalogError, InvariantViolation, MatchProviderFailure
from .catalog import Catalog, CatalogIndex, build_index, load_catalog, load_default_catalog
from .tokenizer import Tokenizer, normalize_query
from .fuzzy import FuzzyMatcher
from .interpreter import QueryInterpreter, ResultSet
from .rendering import (
    ResultRenderer,
    SilentRenderer,
    CallbackRenderer,
    RecordingRenderer,
    ConsoleRenderer,
    compile_caption,
    subtitle_for,
)
from .aggregator import QuerySession, RankingAggregator
from .session import QuerySessionController
from .observability import MetricsCollector

__version__ = "0.1.0"
__all__ = [
    # Data model
    "Action",
    "App",
    "Noun",
    "NounEntry",
    "TypeEntry",
    "VerbEntry",
    "Match",
    "ScoredAction",
    "Suggestion",
    # Configuration and errors
    "ActionSearchConfig",
    "get_default_config",
    "ActionSearchError",
    "CatalogError",
    "InvariantViolation",
    "MatchProviderFailure",
    # Catalog
    "Catalog",
    "CatalogIndex",
    "build_index",
    "load_catalog",
    "load_default_catalog",
    # Engine
    "Tokenizer",
    "normalize_query",
    "FuzzyMatcher",
    "QueryInterpreter",
    "ResultSet",
    "QuerySession",
    "RankingAggregator",
    "QuerySessionController",
    # Rendering
    "ResultRenderer",
    "SilentRenderer",
    "CallbackRenderer",
    "RecordingRenderer",
    "ConsoleRenderer",
    "compile_caption",
    "subtitle_for",
    # Observability
    "MetricsCollector",
]
