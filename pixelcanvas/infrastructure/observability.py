"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Realtime context (project_id, room, event_type, connection_id, user_id) and
      error_code are surfaced when present, in both JSON and text output
    - setup_logging is idempotent: a second call replaces the handler it installed
    - Timestamps come from the record (emit time), not from format time

Design Decisions:
    - JSONFormatter on stdlib logging: no extra dependency
    - Text format keeps the same context as a trailing key=value suffix so
      development logs can still be grepped by project or connection
"""

import logging
import json
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "project_id", "room", "event_type", "error_code",
    "connection_id", "user_id", "path",
)

_HANDLER_NAME = "pixelcanvas"


def _context(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Human-readable line with realtime context appended as key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{pairs}]"


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the app's root handler, replacing one from an earlier call."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextTextFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
