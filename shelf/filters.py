# shelf/filters.py
import os
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from .facets import complexity_band
from .models import Item

TOP_RANK_LIMIT = 100
REGIONAL_FAMILY_MARKER = os.getenv(
    "REGIONAL_FAMILY_MARKER", "Organizations: Game Designers of North Carolina"
)

_SET_FIELDS = ("categories", "mechanisms", "designers", "artists", "publishers")
_INT_FIELDS = ("players", "minutes", "max_age", "year")
_BOOL_FIELDS = ("top_ranked", "sold_in_store", "curated", "regional_designers")
_TRUE_STRINGS = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Criteria:
    """
    Filter settings for one query. Every field has an "inactive" value
    (empty string, 0, False or an empty set) that matches everything.
    """
    search: str = ""
    players: int = 0
    minutes: int = 0
    complexity: str = ""
    max_age: int = 0
    top_ranked: bool = False
    sold_in_store: bool = False
    curated: bool = False
    regional_designers: bool = False
    categories: FrozenSet[str] = field(default_factory=frozenset)
    mechanisms: FrozenSet[str] = field(default_factory=frozenset)
    designers: FrozenSet[str] = field(default_factory=frozenset)
    artists: FrozenSet[str] = field(default_factory=frozenset)
    publishers: FrozenSet[str] = field(default_factory=frozenset)
    year: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Criteria":
        """Build Criteria from a JSON-style mapping; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            if key in _SET_FIELDS:
                if isinstance(value, str):
                    value = [value]
                if not isinstance(value, (list, tuple, set, frozenset)):
                    raise ValueError(f"criteria field '{key}' must be a list, got {value!r}")
                kwargs[key] = frozenset(str(v) for v in value)
            elif key in _INT_FIELDS:
                try:
                    kwargs[key] = int(value)
                except (TypeError, ValueError):
                    raise ValueError(f"criteria field '{key}' must be an integer, got {value!r}")
            elif key in _BOOL_FIELDS:
                if isinstance(value, str):
                    value = value.strip().lower() in _TRUE_STRINGS
                kwargs[key] = bool(value)
            else:
                kwargs[key] = str(value).strip()
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = sorted(value) if f.name in _SET_FIELDS else value
        return out


def _shares_any(values: Tuple[str, ...], selected: FrozenSet[str]) -> bool:
    return any(v in selected for v in values)


def _facet_filter(attribute: str):
    return (
        attribute,
        lambda c: bool(getattr(c, attribute)),
        lambda it, c: _shares_any(getattr(it, attribute), getattr(c, attribute)),
    )


Predicate = Tuple[str, Callable[[Criteria], bool], Callable[[Item, Criteria], bool]]

# (criteria field, is active, item matches)
PREDICATES: List[Predicate] = [
    ("search", lambda c: c.search != "",
     lambda it, c: c.search.lower() in it.name.lower()),
    ("players", lambda c: c.players != 0,
     lambda it, c: it.min_players <= c.players <= it.max_players),
    ("minutes", lambda c: c.minutes != 0,
     lambda it, c: it.min_time <= c.minutes <= it.max_time),
    ("complexity", lambda c: c.complexity != "",
     lambda it, c: complexity_band(it.complexity) == c.complexity),
    ("max_age", lambda c: c.max_age != 0,
     lambda it, c: 0 < it.min_age <= c.max_age),
    ("top_ranked", lambda c: c.top_ranked,
     lambda it, c: it.rank is not None and it.rank <= TOP_RANK_LIMIT),
    ("sold_in_store", lambda c: c.sold_in_store,
     lambda it, c: it.retail_price is not None),
    ("curated", lambda c: c.curated,
     lambda it, c: bool(it.curator_name)),
    ("regional_designers", lambda c: c.regional_designers,
     lambda it, c: bool(it.family) and REGIONAL_FAMILY_MARKER in it.family),
    ("year", lambda c: c.year != 0,
     lambda it, c: it.year_published is not None and it.year_published == c.year),
] + [_facet_filter(name) for name in _SET_FIELDS]


def active_filters(criteria: Criteria) -> List[Tuple[str, Any]]:
    """(field, value) for each criterion that narrows the result."""
    return [
        (name, getattr(criteria, name))
        for name, is_active, _ in PREDICATES
        if is_active(criteria)
    ]


def matches(item: Item, criteria: Criteria) -> bool:
    return all(
        check(item, criteria)
        for _, is_active, check in PREDICATES
        if is_active(criteria)
    )


def filter_items(items: Iterable[Item], criteria: Criteria) -> List[Item]:
    """Items satisfying every active criterion, in catalog order."""
    checks = [check for _, is_active, check in PREDICATES if is_active(criteria)]
    return [it for it in items if all(check(it, criteria) for check in checks)]
