# shelf/catalog.py
import datetime
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

import pytz

from feeds import FeedError, resolve

from .csv_tokenizer import RowShapeError, parse_header, split_lines, tokenize_line
from .logger import get_logger
from .models import Item
from .records import build_item, header_coverage

logger = get_logger(__name__)


def now_utc_iso() -> str:
    return datetime.datetime.now(tz=pytz.UTC).isoformat()


@dataclass(frozen=True)
class Catalog:
    """
    Items from one feed load, in feed order. Never mutated; a reload
    builds a new Catalog.
    """
    items: Tuple[Item, ...] = ()
    source: str = ""
    loaded_at: str = field(default_factory=now_utc_iso)
    skipped_rows: int = 0
    dropped_unowned: int = 0

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def get(self, item_id: str) -> Optional[Item]:
        for it in self.items:
            if it.item_id == item_id:
                return it
        return None


@dataclass(frozen=True)
class LoadResult:
    catalog: Catalog
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_catalog(text: str, source: str = "") -> Catalog:
    """Tokenize feed text and build the Catalog, skipping malformed rows."""
    lines = split_lines(text)
    if not lines:
        logger.warning("Feed %s is empty after removing blank lines.", source or "<text>")
        return Catalog(source=source)

    headers = parse_header(lines[0])
    unknown = header_coverage(headers)
    if unknown:
        logger.debug("Ignoring unrecognized columns: %s", unknown)

    items: List[Item] = []
    skipped = 0
    dropped = 0
    for idx in range(1, len(lines)):
        line = lines[idx]
        try:
            values = tokenize_line(line, expected=len(headers))
        except RowShapeError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed row %d (column count mismatch): expected %d, got %d. Row: %r",
                idx + 1, e.expected, e.actual, line,
            )
            continue

        item = build_item(headers, values, idx)
        if item is None:
            dropped += 1
            continue
        items.append(item)

    logger.info(
        "Parsed %d items from %s (%d malformed rows, %d not owned).",
        len(items), source or "<text>", skipped, dropped,
    )
    return Catalog(
        items=tuple(items),
        source=source,
        skipped_rows=skipped,
        dropped_unowned=dropped,
    )


def load_catalog(source: str, fetch: Optional[Callable[[str], str]] = None) -> LoadResult:
    """
    Retrieve the feed and build a Catalog. A failed retrieval gives an
    empty Catalog plus the error; no rows are kept from a failed load.
    """
    fetcher = fetch or resolve(source)
    try:
        text = fetcher(source)
    except FeedError as e:
        logger.error("Failed to load catalog from %s: %s", source, e)
        return LoadResult(catalog=Catalog(source=source), error=str(e))

    return LoadResult(catalog=parse_catalog(text, source))
