"""
Data Model for the Action Search Engine
=======================================

Immutable records describing the catalog (apps, actions, nouns), the
derived index entries built from it, and the values that flow from query
interpretation into ranking.

Example:
    call = Action(names=("call", "dial"), params=("contact",), caption="Call %")
    phone = App(id="phone", actions=(call,))
    jane = Noun(type="contact", serialized="Jane Doe", fields={"tel": "555-0100"})
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar('T')

# A noun type name such as "contact" or "artist"
NounType = str


@dataclass(frozen=True)
class Action:
    """
    An app-defined operation invocable on a noun.

    Attributes:
        names: Verb synonyms recognising this action (case-insensitive)
        params: Accepted noun types. Only the first one is ever matched.
        caption: Display template with a single '%' substitution marker
        parameterized: Whether text after the noun is meaningful to the action
    """
    names: Tuple[str, ...]
    params: Tuple[NounType, ...]
    caption: str
    parameterized: bool = False

    @property
    def input_type(self) -> Optional[NounType]:
        """The noun type this action is matched against, if it takes one."""
        return self.params[0] if self.params else None


@dataclass(frozen=True)
class App:
    """An application and the actions it offers."""
    id: str
    actions: Tuple[Action, ...] = ()


@dataclass(frozen=True)
class Noun:
    """
    A typed data record.

    Only `serialized` takes part in matching. Everything else the catalog
    provides (tel, subtitle, ...) is kept in `fields` for display.
    """
    type: NounType
    serialized: str
    fields: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Return a display field, or default if the catalog did not set it."""
        return self.fields.get(key, default)


@dataclass(frozen=True)
class VerbEntry:
    """One (app, action, verb name) triple."""
    name: str
    action: Action
    app: App


@dataclass(frozen=True)
class TypeEntry:
    """One (app, action, noun type) triple."""
    type: NounType
    action: Action
    app: App


@dataclass(frozen=True)
class NounEntry:
    """One (type, noun) pair."""
    type: NounType
    noun: Noun


@dataclass(frozen=True)
class Match(Generic[T]):
    """
    A fuzzy match of one corpus item.

    Attributes:
        item: The matched corpus item
        score: Match quality, higher is tighter
        captures: captures[0] is the literal matched substring of the
            accessor value, followed by any regex groups
    """
    item: T
    score: float
    captures: Tuple[str, ...] = ()

    @property
    def matched_text(self) -> str:
        """The literal substring that matched, or '' if none was captured."""
        return self.captures[0] if self.captures else ''


@dataclass(frozen=True)
class ScoredAction:
    """
    A candidate action applied to a noun, with its combined score.

    Attributes:
        app: App offering the action
        action: The action itself
        input: Noun the action would be applied to
        input_type: Always action.params[0]
        score: Verb score plus noun score (noun score alone for noun-first)
        trailing_text: Query text after the noun and verb, None if unknown
    """
    app: App
    action: Action
    input: Noun
    input_type: NounType
    score: float
    trailing_text: Optional[str] = None

    def __repr__(self) -> str:
        """Pretty string representation."""
        return (
            f"ScoredAction(app='{self.app.id}', verb='{self.action.names[0] if self.action.names else ''}', "
            f"input='{self.input.serialized}', score={self.score:.4f})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a flat, JSON-friendly dictionary.

        Returns:
            Dictionary with app id, caption, noun, type, score and trailing text
        """
        return {
            'app': self.app.id,
            'caption': self.action.caption,
            'input': self.input.serialized,
            'input_type': self.input_type,
            'score': self.score,
            'trailing_text': self.trailing_text,
        }


@dataclass(frozen=True)
class Suggestion:
    """An auto-completion entry shown next to the results."""
    serialized_noun: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {'serialized_noun': self.serialized_noun, 'score': self.score}

    @classmethod
    def from_action(cls, action: ScoredAction) -> 'Suggestion':
        """Build the suggestion for a scored action's noun."""
        return cls(serialized_noun=action.input.serialized, score=action.score)
