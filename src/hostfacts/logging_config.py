"""
Logging setup for hostfacts.

Configures the ``hostfacts`` logger hierarchy with a single stderr handler.
Two formats are supported: ``standard`` (human readable) and ``json``
(one JSON object per line, for log shippers).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from hostfacts.config import settings

STANDARD_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``hostfacts`` logger.

    Args:
        level: Log level name (defaults to settings.log_level)
        log_format: 'standard' or 'json' (defaults to settings.log_format)

    Returns:
        The configured ``hostfacts`` logger

    Note:
        Calling this more than once replaces the previously installed handler,
        so repeated CLI invocations in one process do not duplicate output.
    """
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    root = logging.getLogger("hostfacts")
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, "_hostfacts_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler._hostfacts_handler = True  # type: ignore[attr-defined]
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT))

    root.addHandler(handler)
    return root
