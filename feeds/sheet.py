# feeds/sheet.py
import os

import requests
from tenacity import (
    RetryError,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from shelf.logger import get_logger

from .errors import FeedError

logger = get_logger(__name__)

USER_AGENT = os.getenv(
    "FEED_USER_AGENT",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
)
FEED_TIMEOUT = int(os.getenv("FEED_TIMEOUT", "30"))
FEED_MAX_ATTEMPTS = int(os.getenv("FEED_MAX_ATTEMPTS", "3"))
PROXY_URL = os.getenv("FEED_PROXY_URL", "").strip()

SESSION = requests.Session()
SESSION.headers.update({"User-Agent": USER_AGENT, "Accept": "text/csv, text/plain"})
if PROXY_URL:
    SESSION.proxies.update({"http": PROXY_URL, "https": PROXY_URL})


def _is_transient(exc: BaseException) -> bool:
    """Connection problems and 5xx responses are worth another try; 4xx are not."""
    if isinstance(exc, requests.HTTPError):
        resp = exc.response
        return resp is not None and resp.status_code >= 500
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


@retry(
    wait=wait_exponential_jitter(initial=1, max=30),
    stop=stop_after_attempt(FEED_MAX_ATTEMPTS),
    retry=retry_if_exception(_is_transient),
)
def _fetch(url: str) -> str:
    r = SESSION.get(url, timeout=FEED_TIMEOUT)
    r.raise_for_status()
    # Published sheets often omit the charset; the feed is always UTF-8.
    r.encoding = "utf-8"
    return r.text


def fetch_text(url: str) -> str:
    """
    Download the published CSV feed. Raises FeedError on any transport
    failure or non-success status.
    """
    logger.info("Fetching catalog feed from %s", url)
    try:
        text = _fetch(url)
    except RetryError as e:
        logger.error("Feed fetch failed for %s after %d attempts: %s", url, FEED_MAX_ATTEMPTS, e)
        raise FeedError(f"Feed unavailable after {FEED_MAX_ATTEMPTS} attempts: {url}") from e
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        logger.error("Feed returned HTTP %s for %s", status, url)
        raise FeedError(f"HTTP error! status: {status}") from e
    except requests.RequestException as e:
        logger.error("Feed fetch threw unexpected exception for %s: %s", url, e)
        raise FeedError(str(e)) from e

    logger.debug("Fetched %d characters from %s", len(text), url)
    return text
