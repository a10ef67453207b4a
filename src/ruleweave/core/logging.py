"""
Ruleweave Logging

Every module logs through get_logger(__name__). Loggers share one stderr
handler whose format (text or JSON lines) and level come from settings.

Usage:
    from ruleweave.core.logging import get_logger

    logger = get_logger(__name__)
    logger.warning(f"Unknown operator: {name}")
    logger.debug("Mutation cache hit", extra={"mutation": "country"})
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from .config import get_settings

_PACKAGE = "ruleweave"

# Anything on a record beyond these came in through `extra`
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_handler: logging.Handler | None = None
_loggers: dict[str, logging.Logger] = {}


def _short_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _exception_text(record: logging.LogRecord) -> str:
    return "".join(traceback.format_exception(*record.exc_info)) if record.exc_info else ""


class RuleweaveFormatter(logging.Formatter):
    """Render records as `[RULEWEAVE LEVEL] module: message` or as JSON."""

    def __init__(self, json_output: bool = False) -> None:
        super().__init__()
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        if self.json_output:
            return self.format_json(record)

        line = f"[RULEWEAVE {record.levelname}] {_short_name(record.name)}: {record.getMessage()}"
        exception = _exception_text(record)
        return f"{line}\n{exception}" if exception else line

    def format_json(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _STANDARD_ATTRS
        )
        exception = _exception_text(record)
        if exception:
            payload["exception"] = exception
        return json.dumps(payload, default=str)


def _shared_handler() -> logging.Handler:
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(RuleweaveFormatter(json_output=get_settings().log_json))
    return _handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger.

    Args:
        name: Module name, usually __name__

    Returns:
        Logger writing through the shared ruleweave handler
    """
    logger = _loggers.get(name)
    if logger is None:
        logger = logging.getLogger(name)
        logger.setLevel(get_settings().log_level_int)
        logger.addHandler(_shared_handler())
        logger.propagate = False
        _loggers[name] = logger
    return logger


def set_log_level(level: int) -> None:
    """Change the level of every logger handed out by get_logger."""
    for logger in _loggers.values():
        logger.setLevel(level)


def debug_enabled() -> bool:
    """True when debug records would be emitted, to guard costly log arguments."""
    return get_settings().log_level_int <= logging.DEBUG


def reset_logging() -> None:
    """
    Return ruleweave loggers to stock logging behaviour (for testing).

    Detaches the shared handler and makes every ruleweave.* logger
    propagate at level NOTSET, so pytest's caplog sees their records.
    """
    global _handler

    for logger in _loggers.values():
        if _handler is not None:
            logger.removeHandler(_handler)

    for name, entry in list(logging.Logger.manager.loggerDict.items()):
        # Placeholders stand in for loggers that were never created
        if isinstance(entry, logging.Logger) and (name == _PACKAGE or name.startswith(f"{_PACKAGE}.")):
            entry.propagate = True
            entry.setLevel(logging.NOTSET)

    _handler = None
