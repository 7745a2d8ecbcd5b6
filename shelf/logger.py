# shelf/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

_configured = False

# Third-party loggers that flood DEBUG output on every feed request.
NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def _level(name: str, default: str) -> int:
    return getattr(logging, os.getenv(name, default).upper(), logging.INFO)


def setup_logging():
    global _configured
    if _configured:
        return

    log_level = _level("LOG_LEVEL", "INFO")
    http_level = _level("LOG_HTTP_LEVEL", "WARNING")
    log_to_file = os.getenv("LOG_TO_FILE", "false").lower() == "true"
    log_file = os.getenv("LOG_FILE", "/data/shelf_catalog.log")
    log_max_bytes = int(os.getenv("LOG_MAX_BYTES", str(2 * 1024 * 1024)))
    log_backups = int(os.getenv("LOG_BACKUPS", "3"))
    log_to_stdout = os.getenv("LOG_TO_STDOUT", "true").lower() == "true"

    root = logging.getLogger()
    root.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    # Avoid duplicate handlers (pytest installs its own capture handler)
    if not root.handlers:
        if log_to_stdout:
            ch = logging.StreamHandler(sys.stdout)
            ch.setLevel(log_level)
            ch.setFormatter(formatter)
            root.addHandler(ch)

        if log_to_file:
            try:
                os.makedirs(os.path.dirname(log_file), exist_ok=True)
                fh = RotatingFileHandler(
                    log_file,
                    maxBytes=log_max_bytes,
                    backupCount=log_backups,
                    encoding="utf-8",
                )
                fh.setLevel(log_level)
                fh.setFormatter(formatter)
                root.addHandler(fh)
            except OSError as e:
                root.warning("Failed to initialize file logging at %s: %s", log_file, e)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(http_level)

    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
