"""Observability module for questgraph.

Provides structured logging to the console and to JSONL files.
"""

from questgraph.observability.logging import (
    LOG_FILE_NAME,
    close_file_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "LOG_FILE_NAME",
    "close_file_logging",
    "configure_logging",
    "get_logger",
]
