"""
Catalog Module
==============

The app/action/noun catalog and the flat indices derived from it.

The catalog is loaded once at startup and never changes afterwards, so the
three indices are built eagerly as immutable tuples:

- verbs: one VerbEntry per (app, action, verb name)
- types: one TypeEntry per (app, action, param type)
- nouns: one NounEntry per (type, noun)

Consumers must not rely on the order of entries within an index.
"""

import json
import logging
import os
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import CatalogError
from .observability import measure_time
from .types import Action, App, Noun, NounEntry, NounType, TypeEntry, VerbEntry

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')

# Noun type -> bundled asset file
DEFAULT_NOUN_FILES: Dict[NounType, str] = {
    'artist': 'music.json',
    'contact': 'contacts.json',
}
DEFAULT_APPS_FILE = 'apps.json'


@dataclass(frozen=True)
class CatalogIndex:
    """
    Derived lookup tables over a Catalog.

    Attributes:
        verbs: Every (verb name, action, app) binding
        types: Every (param type, action, app) binding
        nouns: Every (type, noun) pair
    """
    verbs: Tuple[VerbEntry, ...]
    types: Tuple[TypeEntry, ...]
    nouns: Tuple[NounEntry, ...]
    _nouns_by_type: Dict[NounType, Tuple[Noun, ...]] = field(
        default_factory=dict, compare=False, hash=False, repr=False
    )
    _types_by_type: Dict[NounType, Tuple[TypeEntry, ...]] = field(
        default_factory=dict, compare=False, hash=False, repr=False
    )

    def nouns_of_type(self, noun_type: NounType) -> Tuple[Noun, ...]:
        """Return the noun corpus for one type (empty if the type is unknown)."""
        return self._nouns_by_type.get(noun_type, ())

    def actions_for_type(self, noun_type: NounType) -> Tuple[TypeEntry, ...]:
        """Return every TypeEntry whose type equals noun_type."""
        return self._types_by_type.get(noun_type, ())


class Catalog:
    """
    The fixed, in-memory corpus of apps and typed nouns.

    Example:
        catalog = Catalog.from_dicts(
            apps=[{"id": "phone", "actions": [
                {"names": ["call"], "params": ["contact"], "caption": "Call %"}]}],
            nouns={"contact": [{"serialized": "Jane Doe", "tel": "555-0100"}]},
        )
        index = catalog.index()
    """

    def __init__(self, apps: Iterable[App], nouns: Mapping[NounType, Iterable[Noun]]):
        self.apps: Tuple[App, ...] = tuple(apps)
        self.nouns: Dict[NounType, Tuple[Noun, ...]] = {
            noun_type: tuple(items) for noun_type, items in nouns.items()
        }
        self._index: Optional[CatalogIndex] = None

    def __repr__(self) -> str:
        counts = {t: len(items) for t, items in self.nouns.items()}
        return f"Catalog(apps={len(self.apps)}, nouns={counts})"

    @property
    def noun_types(self) -> Tuple[NounType, ...]:
        """Declared noun types."""
        return tuple(self.nouns)

    def index(self) -> CatalogIndex:
        """
        Return the derived indices, building them on first use.

        Returns:
            CatalogIndex shared by every caller of this catalog
        """
        if self._index is None:
            self._index = build_index(self.apps, self.nouns)
        return self._index

    @classmethod
    def from_dicts(
        cls,
        apps: List[Dict[str, Any]],
        nouns: Mapping[NounType, List[Dict[str, Any]]]
    ) -> 'Catalog':
        """
        Build a catalog from parsed JSON-style data.

        Args:
            apps: List of app dicts ({"id": ..., "actions": [...]})
            nouns: Noun type -> list of noun dicts (each with "serialized")

        Returns:
            Catalog instance

        Raises:
            CatalogError: If any record is malformed
        """
        parsed_apps = [_parse_app(data, position) for position, data in enumerate(apps)]
        parsed_nouns = {
            noun_type: [_parse_noun(noun_type, data, position)
                        for position, data in enumerate(items)]
            for noun_type, items in nouns.items()
        }
        return cls(parsed_apps, parsed_nouns)


def build_index(apps: Iterable[App], nouns: Mapping[NounType, Iterable[Noun]]) -> CatalogIndex:
    """
    Project a catalog into its verb, type and noun indices.

    An action with no names or no params simply contributes nothing to the
    corresponding index.

    Args:
        apps: Catalog apps
        nouns: Noun type -> nouns of that type

    Returns:
        CatalogIndex
    """
    verbs: List[VerbEntry] = []
    types: List[TypeEntry] = []
    types_by_type: Dict[NounType, List[TypeEntry]] = defaultdict(list)

    for app in apps:
        for action in app.actions:
            for name in action.names:
                verbs.append(VerbEntry(name=name, action=action, app=app))
            for noun_type in action.params:
                entry = TypeEntry(type=noun_type, action=action, app=app)
                types.append(entry)
                types_by_type[noun_type].append(entry)

    noun_entries: List[NounEntry] = []
    nouns_by_type: Dict[NounType, Tuple[Noun, ...]] = {}
    for noun_type, items in nouns.items():
        items = tuple(items)
        nouns_by_type[noun_type] = items
        noun_entries.extend(NounEntry(type=noun_type, noun=noun) for noun in items)

    logger.debug(
        f"Built catalog index: {len(verbs)} verbs, {len(types)} type bindings, "
        f"{len(noun_entries)} nouns"
    )

    return CatalogIndex(
        verbs=tuple(verbs),
        types=tuple(types),
        nouns=tuple(noun_entries),
        _nouns_by_type=nouns_by_type,
        _types_by_type={t: tuple(entries) for t, entries in types_by_type.items()},
    )


# =============================================================================
# LOADING
# =============================================================================

def _read_json(path: str) -> Any:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found: {path}", path=path) from e
    except json.JSONDecodeError as e:
        raise CatalogError(
            f"Catalog file is not valid JSON: {path}", path=path, line=e.lineno
        ) from e


def _string_list(value: Any, what: str, **context) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CatalogError(f"{what} must be a list of strings", **context)
    return tuple(value)


def _parse_action(data: Any, app_id: str, position: int) -> Action:
    context = {'app': app_id, 'action': position}
    if not isinstance(data, dict):
        raise CatalogError("Action must be an object", **context)
    if not isinstance(data.get('caption'), str):
        raise CatalogError("Action caption must be a string", **context)
    return Action(
        names=_string_list(data.get('names', []), 'Action names', **context),
        params=_string_list(data.get('params', []), 'Action params', **context),
        caption=data['caption'],
        parameterized=bool(data.get('parameterized', False)),
    )


def _parse_app(data: Any, position: int) -> App:
    if not isinstance(data, dict) or not isinstance(data.get('id'), str):
        raise CatalogError("App must be an object with a string id", app=position)
    actions = data.get('actions', [])
    if not isinstance(actions, list):
        raise CatalogError("App actions must be a list", app=data['id'])
    return App(
        id=data['id'],
        actions=tuple(_parse_action(a, data['id'], i) for i, a in enumerate(actions)),
    )


def _parse_noun(noun_type: NounType, data: Any, position: int) -> Noun:
    if not isinstance(data, dict) or not isinstance(data.get('serialized'), str):
        raise CatalogError(
            "Noun must be an object with a string 'serialized' field",
            type=noun_type, noun=position
        )
    display = {k: v for k, v in data.items() if k != 'serialized'}
    return Noun(type=noun_type, serialized=data['serialized'], fields=display)


@measure_time
def load_catalog(apps_path: str, noun_paths: Mapping[NounType, str]) -> Catalog:
    """
    Load a catalog from JSON files.

    Args:
        apps_path: Path to a JSON list of apps
        noun_paths: Noun type -> path to a JSON list of nouns of that type

    Returns:
        Catalog instance

    Raises:
        CatalogError: If a file is missing, invalid, or has the wrong shape
    """
    apps = _read_json(apps_path)
    if not isinstance(apps, list):
        raise CatalogError("Apps file must contain a JSON list", path=apps_path)

    nouns: Dict[NounType, List[Dict[str, Any]]] = {}
    for noun_type, path in noun_paths.items():
        items = _read_json(path)
        if not isinstance(items, list):
            raise CatalogError("Noun file must contain a JSON list", path=path, type=noun_type)
        nouns[noun_type] = items

    catalog = Catalog.from_dicts(apps, nouns)
    logger.info(f"Loaded {catalog!r} from {apps_path}")
    return catalog


def load_default_catalog() -> Catalog:
    """Load the sample catalog bundled with the package."""
    return load_catalog(
        os.path.join(DATA_DIR, DEFAULT_APPS_FILE),
        {t: os.path.join(DATA_DIR, name) for t, name in DEFAULT_NOUN_FILES.items()},
    )
