import os
import json
import time
import random
from typing import Any, Dict, List

from shelf.logger import get_logger
from shelf.catalog import Catalog, load_catalog
from shelf.facets import build_facets
from shelf.filters import Criteria, filter_items
from shelf.report import build_plaintext_report

logger = get_logger(__name__)

POLL_MINUTES = int(os.getenv("POLL_MINUTES", "10"))
MODE = os.getenv("MODE", "once").lower()  # "once" or "daemon"
CATALOG_FEED_URL = os.getenv("CATALOG_FEED_URL", "").strip()
CRITERIA_PATH = os.getenv("CRITERIA_PATH", "/data/criteria.json")

# The catalog currently served and its facet lists; reloads rebind both, nothing mutates them.
CURRENT_CATALOG: Catalog = Catalog()
CURRENT_FACETS: Dict[str, List[Any]] = build_facets(CURRENT_CATALOG)


def jitter_sleep_minutes(minutes: int) -> None:
    base = max(1, minutes)
    jitter = random.uniform(-0.1 * base, 0.1 * base)
    total = base + jitter
    logger.info("Sleeping %.1f minutes before next reload.", total)
    time.sleep(total * 60)


def load_criteria(path: str | None = None) -> Criteria:
    path = path or CRITERIA_PATH
    if not os.path.exists(path):
        logger.info("No criteria file at %s; showing the whole catalog.", path)
        return Criteria()
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg: Dict[str, Any] = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to load criteria file at %s: %s", path, e)
        raise SystemExit(1)

    if not isinstance(cfg, dict):
        logger.error("Criteria file must hold a JSON object.")
        raise SystemExit(1)

    try:
        return Criteria.from_dict(cfg)
    except ValueError as e:
        logger.error("Invalid criteria in %s: %s", path, e)
        raise SystemExit(1)


def refresh_catalog(source: str | None = None):
    """Load the feed and swap it and its facet lists in as current."""
    global CURRENT_CATALOG, CURRENT_FACETS
    result = load_catalog(source or CATALOG_FEED_URL)
    CURRENT_CATALOG = result.catalog
    CURRENT_FACETS = build_facets(CURRENT_CATALOG)
    logger.debug(
        "Facet sizes: %s",
        {name: len(values) for name, values in CURRENT_FACETS.items()},
    )
    return result


def run_once() -> int:
    if not CATALOG_FEED_URL:
        logger.error("CATALOG_FEED_URL is not set.")
        return 1

    criteria = load_criteria()
    result = refresh_catalog()
    matched = filter_items(CURRENT_CATALOG, criteria)
    print(build_plaintext_report(CURRENT_CATALOG, criteria, matched, error=result.error))
    return 0 if result.ok else 2


def run_daemon() -> None:
    if not CATALOG_FEED_URL:
        logger.error("CATALOG_FEED_URL is not set.")
        raise SystemExit(1)

    logger.info("Starting daemon; reload every %d minutes.", POLL_MINUTES)
    while True:
        try:
            criteria = load_criteria()
            result = refresh_catalog()
            matched = filter_items(CURRENT_CATALOG, criteria)
            if result.ok:
                logger.info(
                    "Catalog reloaded at %s: %d items, %d match current criteria.",
                    CURRENT_CATALOG.loaded_at, len(CURRENT_CATALOG), len(matched),
                )
            else:
                logger.error("Catalog reload failed; serving an empty catalog: %s", result.error)
        except Exception as e:
            logger.exception("Unhandled error in daemon loop: %s", e)

        jitter_sleep_minutes(POLL_MINUTES)


if __name__ == "__main__":
    try:
        if MODE == "daemon":
            run_daemon()
        else:
            raise SystemExit(run_once())
    except Exception as e:
        logger.exception("Fatal catalog error: %s", e)
        raise SystemExit(2)
