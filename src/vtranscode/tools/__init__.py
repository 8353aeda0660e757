"""Parsers for external tool output."""

from vtranscode.tools.ffmpeg_progress import (
    PROGRESS_SENTINEL,
    compute_progress,
    has_time_field,
    parse_elapsed_seconds,
)

__all__ = [
    "PROGRESS_SENTINEL",
    "compute_progress",
    "has_time_field",
    "parse_elapsed_seconds",
]
