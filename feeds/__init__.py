from urllib.parse import urlparse

from . import file
from . import sheet
from .errors import FeedError

FEEDS = {
    "http": sheet.fetch_text,
    "file": file.fetch_text,
}


def resolve(source: str):
    """Pick the fetcher for a feed location by its URL scheme."""
    scheme = urlparse(source).scheme.lower()
    if scheme in ("http", "https"):
        return FEEDS["http"]
    return FEEDS["file"]
