"""
Centralized logging configuration for pushnotifier.

Call ``setup_logging()`` once from an entry point (cli/main.py). Every other
module should just do::

    import logging
    logger = logging.getLogger(__name__)

Library code never configures handlers itself.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    *,
    level: Optional[str] = None,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure the root logger with a single stream handler.

    Parameters
    ----------
    level:
        Log level name (DEBUG, INFO, WARNING, ...).
        Falls back to the ``LOG_LEVEL`` env-var, then ``WARNING``.
    json_format:
        Emit one JSON object per record instead of plain text.
    stream:
        Destination, *stderr* by default so command output on stdout stays clean.
    """
    resolved_level = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolved_level)
