"""JSON log lines for the gateway.

Gateway context is passed with ``extra=``; the keys in ``CONTEXT_FIELDS``
are lifted into the payload so a lifecycle transition or a failed send can
be filtered on without parsing the message text.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

CONTEXT_FIELDS = ("event", "group_id", "reason", "status", "session")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


def get_logger(name: str = "wagate", level: int | str = logging.INFO) -> logging.Logger:
    """Configure ``name`` (normally the package root) to emit JSON lines on stderr.

    Calling it again only changes the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger
