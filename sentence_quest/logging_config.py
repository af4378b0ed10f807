"""
Logging setup for the Sentence Quest service.

Two context vars travel with every request:
- request_id: set by RequestLogMiddleware from X-Request-ID
- player_id: bound by the progression engines once the player is resolved

ContextFilter copies both onto each record, so engine code only passes the
fields specific to the event (stars, word counts...) through extra=.

Usage:
    from sentence_quest.logging_config import bind_player, get_logger
    logger = get_logger(__name__)
    bind_player(player.id)
    logger.info("Mission completed", extra={"stars": 3})
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
player_id_var: ContextVar[Optional[str]] = ContextVar("player_id", default=None)

CONTEXT_FIELDS = ("request_id", "player_id")

# LogRecord attributes that are never copied into the JSON body
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}


def bind_player(player_id: Optional[uuid.UUID]) -> None:
    """Attach a player to every log line emitted for the rest of the request."""
    player_id_var.set(str(player_id) if player_id else None)


class ContextFilter(logging.Filter):
    """Copy request and player context onto the record ('-' when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"  # type: ignore[attr-defined]
        record.player_id = player_id_var.get() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: context fields first, then whatever came via extra=."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, "-")
            if value != "-":
                entry[field] = value

        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key in CONTEXT_FIELDS or value is None:
                continue
            entry[key] = value if isinstance(value, (str, int, float, bool, list, dict)) else str(value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure the root logger once at startup.

    JSON lines in production; a compact one-line format everywhere else.
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(ContextFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s player=%(player_id)s %(message)s",
            datefmt="%H:%M:%S",
        ))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
