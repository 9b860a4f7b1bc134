# gofast_planner/logging_config.py
"""
Stderr-only logging configuration.

MCP uses stdio transport, so the server logs JSON lines to stderr and never
writes to stdout. The CLI uses a plain human-readable format on stderr.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _install(handler: logging.Handler, level: int) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Route third-party loggers through the same handler
    for logger_name in ["fastmcp", "httpx"]:
        logger = logging.getLogger(logger_name)
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING if logger_name == "httpx" else level)
        logger.propagate = False


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure logging to output JSON to stderr only.

    Must be called before any imports that might create handlers.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    _install(handler, level)


def configure_cli_logging(verbose: bool = False) -> None:
    """Human-readable stderr logging for CLI commands."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s  %(levelname)-7s  %(message)s", datefmt="%H:%M:%S")
    )
    _install(handler, logging.INFO if verbose else logging.WARNING)
