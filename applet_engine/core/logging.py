"""Logging configuration for the applet workflow engine.

Run context (run_id, workflow_id, anything a caller adds) is kept in a
ContextVar, so every asyncio task sees only the context of the run it
belongs to, even when several runs are awaited together.
"""

import logging
import sys
import json
import traceback
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Optional, Dict, Any
from pathlib import Path

if TYPE_CHECKING:
    from ..config import EngineConfig

_run_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar("applet_engine_run_context", default=None)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s:%(funcName)s:%(lineno)d] - %(message)s"


class StructuredFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info)
            }

        entry.update(getattr(record, "extra_fields", {}))
        return json.dumps(entry, default=str)


class RunContextFilter(logging.Filter):
    """Copies the current task's run context onto each record.

    Fields passed explicitly through log_with_context win over run context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        fields = dict(getattr(record, "extra_fields", {}))
        for key, value in (_run_context.get() or {}).items():
            fields.setdefault(key, value)
        record.extra_fields = fields
        return True


_context_filter = RunContextFilter()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    structured: bool = False,
    max_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure root logging for the engine.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path; rotated once it reaches max_size
        log_format: Format string for plain-text output
        structured: Emit JSON lines instead of plain text
        max_size: Maximum log file size in bytes before rotation
        backup_count: Number of rotated files to keep

    Returns:
        Root logger instance
    """
    if structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(fmt=log_format or DEFAULT_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=max_size, backupCount=backup_count))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_context_filter)
        root_logger.addHandler(handler)

    for noisy in ("sqlalchemy.engine", "sqlalchemy.pool", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return root_logger


def configure_logging(config: "EngineConfig") -> logging.Logger:
    """Apply the logging settings of an EngineConfig."""
    root_logger = setup_logging(
        level=config.log_level.value,
        log_file=config.log_file,
        log_format=config.log_format,
        structured=config.structured_logging,
        max_size=config.log_max_size,
        backup_count=config.log_backup_count
    )
    if config.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    root_logger.info(f"Logging configured for {config.app_name} v{config.app_version}"
                     f"{' (debug)' if config.debug else ''}")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name."""
    return logging.getLogger(name)


def set_logging_context(**kwargs) -> Token:
    """Add fields to the current task's run context.

    Returns a token for reset_logging_context().
    """
    current = _run_context.get() or {}
    return _run_context.set({**current, **kwargs})


def reset_logging_context(token: Token) -> None:
    """Restore the run context in place before the matching set_logging_context()."""
    _run_context.reset(token)


def clear_logging_context():
    """Drop every field from the current task's run context."""
    _run_context.set(None)


def get_logging_context() -> Dict[str, Any]:
    """Return a copy of the current task's run context."""
    return dict(_run_context.get() or {})


def log_with_context(logger: logging.Logger, level: int, message: str, **context):
    """Log a message with additional context fields."""
    logger.log(level, message, extra={"extra_fields": context})
