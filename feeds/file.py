# feeds/file.py
from pathlib import Path
from urllib.parse import urlparse

from shelf.logger import get_logger

from .errors import FeedError

logger = get_logger(__name__)


def _to_path(location: str) -> Path:
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(parsed.path)
    return Path(location)


def fetch_text(location: str) -> str:
    """Read a feed exported to disk (plain path or file:// URL)."""
    path = _to_path(location)
    logger.info("Reading catalog feed from %s", path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to read feed file %s: %s", path, e)
        raise FeedError(f"Cannot read feed file {path}: {e}") from e
