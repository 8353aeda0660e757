"""Structured logging for vtranscode.

Provides configurable logging with JSON format support, file rotation and
per-transcode context tagging.
"""

from vtranscode.logging.config import configure_logging
from vtranscode.logging.context import (
    TranscodeContextFilter,
    clear_transcode_context,
    get_transcode_context,
    set_transcode_context,
    transcode_context,
)
from vtranscode.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "TranscodeContextFilter",
    "clear_transcode_context",
    "configure_logging",
    "get_transcode_context",
    "set_transcode_context",
    "transcode_context",
]
