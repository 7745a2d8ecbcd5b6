# shelf/facets.py
import math
import os
import re
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Item

FACET_ATTRIBUTES = ("categories", "mechanisms", "designers", "artists", "publishers")

# Designers hidden from the designer selector (comma separated)
_HIDDEN_DESIGNERS_RAW = os.getenv("FACET_HIDDEN_DESIGNERS", "").strip()

# (label, lower bound exclusive, upper bound inclusive, derived play time band)
# The first band also includes its lower bound.
COMPLEXITY_BANDS: Tuple[Tuple[str, float, float, Tuple[int, int]], ...] = (
    ("Low", 1.0, 2.0, (15, 30)),
    ("Medium", 2.0, 2.5, (30, 45)),
    ("High", 2.5, 5.0, (60, 120)),
)

_ARTICLE_RE = re.compile(r"^(a|an|the)\s+", re.IGNORECASE)


def complexity_band(weight: float) -> str:
    """Classify a complexity score as Low/Medium/High, or '' if it fits no band."""
    if weight is None or math.isnan(weight):
        return ""
    w = max(1.0, min(5.0, weight))
    for idx, (label, low, high, _) in enumerate(COMPLEXITY_BANDS):
        if (w > low or (idx == 0 and w == low)) and w <= high:
            return label
    return ""


def band_play_time(weight: float) -> Optional[Tuple[int, int]]:
    label = complexity_band(weight)
    for band_label, _, _, minutes in COMPLEXITY_BANDS:
        if band_label == label:
            return minutes
    return None


def sort_key(value: str) -> Tuple[str, str]:
    """Case-insensitive key that files 'The Crew' under C."""
    return _ARTICLE_RE.sub("", value.lower()), value


def facet_values(items: Iterable[Item], attribute: str, exclude: Iterable[str] = ()) -> List[str]:
    """
    Distinct non-empty values of `attribute` across all items, sorted with
    leading articles ignored. Scalar attributes count as one value.
    """
    hidden = set(exclude)
    seen = set()
    for item in items:
        raw = getattr(item, attribute)
        values = raw if isinstance(raw, tuple) else (raw,)
        for v in values:
            if v is None or v == "":
                continue
            v = str(v)
            if v not in hidden:
                seen.add(v)
    return sorted(seen, key=sort_key)


def year_values(items: Iterable[Item]) -> List[int]:
    """Distinct publication years, newest first."""
    return sorted({it.year_published for it in items if it.year_published is not None}, reverse=True)


def hidden_designers() -> List[str]:
    if not _HIDDEN_DESIGNERS_RAW:
        return []
    return [p.strip() for p in _HIDDEN_DESIGNERS_RAW.split(",") if p.strip()]


def build_facets(items: Iterable[Item]) -> Dict[str, list]:
    items = list(items)
    facets: Dict[str, list] = {}
    for attribute in FACET_ATTRIBUTES:
        exclude = hidden_designers() if attribute == "designers" else ()
        facets[attribute] = facet_values(items, attribute, exclude=exclude)
    facets["years"] = year_values(items)
    return facets
