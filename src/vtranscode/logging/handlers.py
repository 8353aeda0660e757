"""JSON log formatting for vtranscode."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord has; anything else arrived through ``extra=``
_RECORD_ATTRS: frozenset[str] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}

# Set by TranscodeContextFilter and emitted as top-level keys instead
_TRANSCODE_ATTRS = {"source_path": "source", "output_path": "output"}


class JSONFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    Keys: ``timestamp`` (UTC, ISO-8601), ``level``, ``message``, ``logger``
    for non-root loggers, ``source``/``output`` while a transcode runs,
    ``context`` holding ``extra=`` values, and ``exception`` when
    ``exc_info`` is set.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name != "root":
            entry["logger"] = record.name

        for attr, key in _TRANSCODE_ATTRS.items():
            value = getattr(record, attr, None)
            if value:
                entry[key] = value

        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
            and key not in _TRANSCODE_ATTRS
            and key != "source_tag"
            and not key.startswith("_")
        }
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
