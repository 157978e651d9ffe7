"""
Exception classes for the action search engine.

All exceptions carry a human-readable message plus a JSON-friendly
context dict so they can be logged or reported without extra formatting.
"""

from typing import Any, Dict


class ActionSearchError(Exception):
    """Base exception for all action search errors."""

    def __init__(self, message: str, **context):
        """
        Initialize error with message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context for debugging (must be JSON-serializable)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to JSON-serializable dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context
        }


class InvariantViolation(ActionSearchError):
    """Internal consistency failure. Aborts the current query, never retried."""
    pass


class MatchProviderFailure(ActionSearchError):
    """The fuzzy matcher could not evaluate a pattern against a corpus."""
    pass


class CatalogError(ActionSearchError):
    """Catalog data is missing, unreadable, or malformed."""
    pass
