# shelf/report.py
import os
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader

from .catalog import Catalog
from .facets import complexity_band
from .filters import Criteria, active_filters
from .models import Item

# Resolve template directory relative to this file
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), keep_trailing_newline=True)

REPORT_LIMIT = int(os.getenv("REPORT_LIMIT", "50"))


def _price_to_str(price: Optional[float]) -> str:
    if price is None:
        return "Not sold in store"
    return f"${price:.2f}"


def _range_to_str(low: int, high: int, unit: str = "") -> str:
    text = str(low) if low == high else f"{low}-{high}"
    return f"{text}{unit}"


def _filter_value_to_str(value) -> str:
    if isinstance(value, bool):
        return "yes"
    if isinstance(value, frozenset):
        return ", ".join(sorted(value))
    return str(value)


def _item_row(it: Item) -> dict:
    return {
        "name": it.name,
        "year": it.year_published or "",
        "item_type": it.item_type,
        "players": _range_to_str(it.min_players, it.max_players),
        "time": _range_to_str(it.min_time, it.max_time, " min"),
        "complexity": f"{it.complexity:.2f} ({complexity_band(it.complexity) or '?'})",
        "age": f"{it.min_age}+" if it.min_age else "",
        "price_str": _price_to_str(it.retail_price),
        "shelf_location": it.shelf_location,
        "curator_name": it.curator_name or "",
        "curator_note": it.curator_note or "",
    }


def build_plaintext_report(
    catalog: Catalog,
    criteria: Criteria,
    matched: List[Item],
    error: Optional[str] = None,
    limit: int = REPORT_LIMIT,
) -> str:
    template = env.get_template("catalog_text.txt")

    filters = [
        {"name": name.replace("_", " "), "value": _filter_value_to_str(value)}
        for name, value in active_filters(criteria)
    ]

    summary_text = (
        f"{len(matched)} of {len(catalog)} items match · "
        f"{catalog.skipped_rows} malformed rows · {catalog.dropped_unowned} not owned"
    )

    ctx = {
        "source": catalog.source,
        "loaded_at": catalog.loaded_at,
        "error": error,
        "summary_text": summary_text,
        "filters": filters,
        "items": [_item_row(it) for it in matched[:limit]],
        "truncated": max(0, len(matched) - limit),
    }

    return template.render(**ctx)
