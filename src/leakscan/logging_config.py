"""Logging setup for the ``leakscan`` logger hierarchy.

Library modules only call ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once. Log records never contain matched secrets.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "leakscan"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def configure_logging(level: str = "INFO", fmt: str = "rich") -> logging.Logger:
    """Install a single stderr handler on the ``leakscan`` logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    logger.handlers.clear()
    logger.propagate = False

    handler: logging.Handler
    if fmt == "rich":
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    elif fmt == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )

    logger.addHandler(handler)
    return logger
