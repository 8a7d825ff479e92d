"""Diagnostics — structured logging and Sentry error reporting.

Layers:
1. Structured JSON logging with RotatingFileHandler
2. Sentry (only when a DSN is configured), PII stripped before send
"""

import datetime
import json
import logging
import logging.handlers
import os
import re

import sentry_sdk

from glitchmixer._version import __version__

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = "~/.glitchmixer/logs"
LOG_FILE = "glitchmixer.log"


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_entry)


def setup_structured_logging(log_dir: str | None = None) -> str:
    """Configure structured JSON logging with rotation.

    Args:
        log_dir: Override log directory (default: $GLITCHMIXER_LOG_DIR or
            ~/.glitchmixer/logs).

    Returns:
        The directory logs are written to.
    """
    resolved_dir = os.path.expanduser(
        log_dir or os.environ.get("GLITCHMIXER_LOG_DIR", "") or DEFAULT_LOG_DIR
    )
    os.makedirs(resolved_dir, mode=0o700, exist_ok=True)

    log_path = os.path.join(resolved_dir, LOG_FILE)
    log_level = os.environ.get("GLITCHMIXER_LOG_LEVEL", "INFO").upper()

    # Rotating handler: 10MB max, 7 backups
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10_000_000,
        backupCount=7,
    )
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.addHandler(handler)

    return resolved_dir


# --- PII stripping for Sentry ---

_HOME = os.path.expanduser("~")
_PATH_PATTERN = re.compile(r"/Users/[^/\s]+|/home/[^/\s]+|C:\\Users\\[^\\\s]+")
_SENSITIVE_KEYS = {"token", "auth", "key", "secret", "password", "dsn"}


def _scrub_dict(d: dict):
    """Redact values for keys that look sensitive."""
    for key in list(d.keys()):
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            d[key] = "<REDACTED>"


def strip_pii(event: dict, hint: dict) -> dict:
    """Sentry before_send hook. Strips home paths and auth tokens."""
    event_str = json.dumps(event)
    event_str = event_str.replace(_HOME, "<HOME>")
    event_str = _PATH_PATTERN.sub("<REDACTED_PATH>", event_str)
    event = json.loads(event_str)

    _scrub_dict(event.get("extra", {}))
    for ctx in event.get("contexts", {}).values():
        if isinstance(ctx, dict):
            _scrub_dict(ctx)
    return event


def init_sentry(dsn: str | None = None):
    """Initialize Sentry. An empty DSN keeps the SDK inert (events are dropped)."""
    sentry_sdk.init(
        dsn=dsn if dsn is not None else os.environ.get("SENTRY_DSN", ""),
        release=f"glitchmixer@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        before_send=strip_pii,
        max_breadcrumbs=50,
    )


def init_diagnostics(log_dir: str | None = None, dsn: str | None = None) -> str:
    """Initialize logging and error reporting. Call once from the host application."""
    resolved = setup_structured_logging(log_dir)
    init_sentry(dsn)
    logger.info("Diagnostics initialized: logging=%s", resolved)
    return resolved
