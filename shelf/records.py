# shelf/records.py
import os
import re
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import quote

from .facets import band_play_time
from .logger import get_logger
from .models import DEFAULT_COMPLEXITY, DEFAULT_MAX_PLAYERS, UNKNOWN_NAME, Item
from .tags import split_tags

logger = get_logger(__name__)

IMAGE_PLACEHOLDER_URL = os.getenv(
    "IMAGE_PLACEHOLDER_URL",
    "https://placehold.co/150x150/cccccc/000000?text={label}...",
)

ITEM_TYPE_NAMES = {
    "standalone": "Base Game",
    "expansion": "Expansion",
}

_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_LEADING_AGE_RE = re.compile(r"^(\d+)")

Rule = Callable[[str], Dict[str, Any]]


def parse_int(raw: str) -> Optional[int]:
    """Read the leading integer of a cell ('120 min' -> 120), or None."""
    m = _INT_RE.match(raw or "")
    return int(m.group(1)) if m else None


def parse_float(raw: str) -> Optional[float]:
    m = _FLOAT_RE.match(raw or "")
    return float(m.group(1)) if m else None


def _text(field: str, default: str = "") -> Rule:
    return lambda raw: {field: raw or default}


def _optional_text(field: str) -> Rule:
    return lambda raw: {field: raw or None}


def _count(field: str, default: int) -> Rule:
    def rule(raw: str) -> Dict[str, Any]:
        value = parse_int(raw)
        if value is None or value < 0:
            if raw:
                logger.debug("Unparseable %s %r; using %s", field, raw, default)
            value = default
        return {field: value}
    return rule


def _positive_or_none(field: str) -> Rule:
    def rule(raw: str) -> Dict[str, Any]:
        value = parse_int(raw)
        return {field: value if value is not None and value > 0 else None}
    return rule


def _nonzero_or_none(field: str) -> Rule:
    """Signed integer; 0 doubles as the "any" filter value, so it means unset."""
    def rule(raw: str) -> Dict[str, Any]:
        value = parse_int(raw)
        return {field: value or None}
    return rule


def _signed(field: str, default: int) -> Rule:
    def rule(raw: str) -> Dict[str, Any]:
        value = parse_int(raw)
        if value is None:
            if raw:
                logger.debug("Unparseable %s %r; using %s", field, raw, default)
            value = default
        return {field: value}
    return rule


def _decimal(field: str, default: Optional[float] = None, allow_negative: bool = True) -> Rule:
    def rule(raw: str) -> Dict[str, Any]:
        value = parse_float(raw)
        if value is None or (not allow_negative and value < 0):
            if raw:
                logger.debug("Unparseable %s %r; using %s", field, raw, default)
            value = default
        return {field: value}
    return rule


def _tags(field: str) -> Rule:
    return lambda raw: {field: tuple(split_tags(raw))}


def _item_type(raw: str) -> Dict[str, Any]:
    return {"item_type": ITEM_TYPE_NAMES.get(raw.lower(), raw)}


def _age_range(raw: str) -> Dict[str, Any]:
    m = _LEADING_AGE_RE.match(raw or "")
    return {
        "age_range": raw or None,
        "min_age": int(m.group(1)) if m else 0,
    }


# Header key (lowercased) -> coercion rule. Columns not listed are ignored.
COLUMN_RULES: Dict[str, Rule] = {
    "objectid": _text("item_id"),
    "objectname": _text("name", UNKNOWN_NAME),
    "minplayers": _count("min_players", 0),
    "maxplayers": _count("max_players", DEFAULT_MAX_PLAYERS),
    "difficulty": _count("difficulty", 0),
    "avgweight": _decimal("complexity", DEFAULT_COMPLEXITY),
    "minplaytime": _count("min_time", 0),
    "maxplaytime": _count("max_time", 0),
    "rank": _positive_or_none("rank"),
    "average": _decimal("rating"),
    "imageurl": _text("image_url"),
    "comment": _text("shelf_location"),
    "description": _text("description"),
    "itemtype": _item_type,
    "retailprice": _decimal("retail_price", allow_negative=False),
    "bggrecagerange": _age_range,
    "staffpicksname": _optional_text("curator_name"),
    "staffpicksdescription": _optional_text("curator_note"),
    "category": _tags("categories"),
    "mechanism": _tags("mechanisms"),
    "designer": _tags("designers"),
    "artist": _tags("artists"),
    "publisher": _tags("publishers"),
    "family": _optional_text("family"),
    "own": _signed("owned_count", 0),
    "yearpublished": _nonzero_or_none("year_published"),
}


def placeholder_image_url(name: str) -> str:
    return IMAGE_PLACEHOLDER_URL.format(label=quote(name[:5]))


def derive_play_time(fields: Dict[str, Any]) -> None:
    """Backfill max_time from min_time, or both from the complexity band."""
    min_time = fields.get("min_time", 0)
    max_time = fields.get("max_time", 0)
    if max_time < min_time:
        # covers an unset max_time as well as a reversed range
        fields["max_time"] = min_time
    elif min_time == 0 and max_time == 0:
        band = band_play_time(fields.get("complexity", DEFAULT_COMPLEXITY))
        if band is not None:
            fields["min_time"], fields["max_time"] = band


def coerce_row(headers: Sequence[str], values: Sequence[str]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for header, value in zip(headers, values):
        rule = COLUMN_RULES.get(header)
        if rule is not None:
            fields.update(rule(value))
    return fields


def build_item(headers: Sequence[str], values: Sequence[str], row_index: int) -> Optional[Item]:
    """
    Build one Item from a header-aligned row.
    Returns None when the row is not owned (own == 0) and must be left out.
    """
    fields = coerce_row(headers, values)
    derive_play_time(fields)

    fields["item_id"] = fields.get("item_id") or f"item-{row_index}"
    fields["name"] = fields.get("name") or UNKNOWN_NAME
    fields["image_url"] = fields.get("image_url") or placeholder_image_url(fields["name"])

    item = Item(**fields)
    if item.owned_count == 0:
        logger.debug("Row %d (%s) has own=0; leaving it out.", row_index, item.name)
        return None
    return item


def header_coverage(headers: List[str]) -> List[str]:
    """Header names that no column rule recognizes."""
    return [h for h in headers if h not in COLUMN_RULES]
