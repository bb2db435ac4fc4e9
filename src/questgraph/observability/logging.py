"""Structured logging configuration for questgraph.

Events are emitted through structlog and routed by the standard library:

- the console (stderr, via Rich) shows WARNING and up, or more with ``-v``
- with ``--log``, every event is appended to ``<config dir>/logs/debug.jsonl``
  with its keyword context as top-level JSON fields
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

LOG_FILE_NAME = "debug.jsonl"

# Keys structlog adds that the JSONL entry already carries under its own names
_RESERVED_KEYS = ("level", "timestamp", "logger")

_configured = False
_file_handler: logging.FileHandler | None = None


def _jsonl_entry(record: logging.LogRecord) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
        "level": record.levelname,
        "logger": record.name,
    }
    if isinstance(record.msg, dict):
        context = {k: v for k, v in record.msg.items() if k not in _RESERVED_KEYS}
        entry["message"] = context.pop("event", "")
        entry.update(context)
    else:
        entry["message"] = record.getMessage()
    if record.exc_info and record.exc_info[1] is not None:
        entry["exception"] = repr(record.exc_info[1])
    return entry


class JSONLFileHandler(logging.FileHandler):
    """File handler that appends one JSON object per event."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(_jsonl_entry(record), default=str) + "\n"
            if self.stream is None:
                self.stream = self._open()
            self.stream.write(line)
            self.stream.flush()
        except Exception:
            self.handleError(record)


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_dir: Path | None = None,
) -> Path | None:
    """Configure logging for questgraph.

    Safe to call again; a previous log file is closed first.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG on the console.
        log_to_file: If True, also append every event to ``log_dir``.
        log_dir: Directory for the JSONL log. Required if log_to_file=True.

    Returns:
        Path of the JSONL log file, or None when file logging is off.

    Raises:
        ValueError: If log_to_file=True but log_dir is not provided.
    """
    global _configured, _file_handler

    if log_to_file and log_dir is None:
        raise ValueError("log_dir is required when log_to_file=True")

    close_file_logging()

    levels = {0: logging.WARNING, 1: logging.INFO}
    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
        level=levels.get(verbosity, logging.DEBUG),
    )
    handlers: list[logging.Handler] = [console_handler]

    log_path: Path | None = None
    if log_to_file and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / LOG_FILE_NAME
        _file_handler = JSONLFileHandler(str(log_path), mode="a")
        _file_handler.setLevel(logging.DEBUG)
        handlers.append(_file_handler)

    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )

    _configured = True
    return log_path


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger, configuring defaults on first use.

    Args:
        name: Logger name (typically __name__).
    """
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def close_file_logging() -> None:
    """Close the JSONL file handler, if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
