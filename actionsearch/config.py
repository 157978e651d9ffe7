"""
Configuration Module
====================

Centralized configuration for the action search engine.

This module provides a dataclass-based configuration system that allows
callers to tune result caps and matching behaviour without modifying the
source code.

Example:
    from actionsearch import ActionSearchConfig, QuerySessionController

    # Render more results and keep a single suggestion
    config = ActionSearchConfig(
        max_results_rendered=30,
        max_suggestions=1,
    )
    controller = QuerySessionController.from_catalog(catalog, config=config)

    # Or modify defaults
    config = ActionSearchConfig()
    config.enable_metrics = True
"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class ActionSearchConfig:
    """
    Configuration settings for the action search engine.

    Attributes:
        max_results_retained: How many ranked actions a query session keeps.
            Lower-scored arrivals beyond this cap are discarded.
        max_results_rendered: How many of the retained actions are handed
            to the renderer. Must not exceed max_results_retained.
        max_suggestions: Size of the noun auto-completion list.

        noun_lookahead: When a query starts with a verb, how many of the
            following terms may make up the noun (1 or 2).
        case_sensitive: Match verbs and nouns case-sensitively. Queries are
            always lowercased, so this is mostly useful for tests.

        enable_metrics: Record counts and timings in a MetricsCollector.
    """

    # Ranking caps
    max_results_retained: int = 100
    max_results_rendered: int = 20
    max_suggestions: int = 2

    # Interpretation
    noun_lookahead: int = 2
    case_sensitive: bool = False

    # Observability
    enable_metrics: bool = False

    def __post_init__(self):
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self):
        """
        Validate configuration values are within acceptable ranges.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if self.max_results_retained < 1:
            raise ValueError(
                f"max_results_retained must be at least 1, got {self.max_results_retained}"
            )
        if self.max_results_rendered < 1:
            raise ValueError(
                f"max_results_rendered must be at least 1, got {self.max_results_rendered}"
            )
        if self.max_results_rendered > self.max_results_retained:
            raise ValueError(
                f"max_results_rendered ({self.max_results_rendered}) must not exceed "
                f"max_results_retained ({self.max_results_retained})"
            )
        if self.max_suggestions < 1:
            raise ValueError(
                f"max_suggestions must be at least 1, got {self.max_suggestions}"
            )
        if self.noun_lookahead not in (1, 2):
            raise ValueError(
                f"noun_lookahead must be 1 or 2, got {self.noun_lookahead}"
            )

    def copy(self) -> 'ActionSearchConfig':
        """
        Create a copy of this configuration.

        Returns:
            A new ActionSearchConfig instance with the same values.
        """
        return ActionSearchConfig(**self.to_dict())

    def to_dict(self) -> Dict:
        """
        Convert configuration to a dictionary for serialization.

        Returns:
            Dictionary representation of the configuration.
        """
        return {
            'max_results_retained': self.max_results_retained,
            'max_results_rendered': self.max_results_rendered,
            'max_suggestions': self.max_suggestions,
            'noun_lookahead': self.noun_lookahead,
            'case_sensitive': self.case_sensitive,
            'enable_metrics': self.enable_metrics,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ActionSearchConfig':
        """
        Create configuration from a dictionary.

        Args:
            data: Dictionary with configuration values.

        Returns:
            ActionSearchConfig instance.

        Raises:
            TypeError: If data contains an unknown key.
        """
        return cls(**data)


def get_default_config() -> ActionSearchConfig:
    """
    Get a new instance of the default configuration.

    Returns:
        ActionSearchConfig with default values.
    """
    return ActionSearchConfig()
