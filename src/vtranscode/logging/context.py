"""Transcode context for structured logging.

Uses contextvars so every record emitted while a transcode runs carries the
source and destination it belongs to.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_source_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source_path", default=None
)
_output_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "output_path", default=None
)


def set_transcode_context(
    source_path: Path | str,
    output_path: Path | str | None = None,
) -> None:
    """Set the current transcode context."""
    _source_path.set(str(source_path))
    _output_path.set(str(output_path) if output_path is not None else None)


def clear_transcode_context() -> None:
    """Clear the current transcode context."""
    _source_path.set(None)
    _output_path.set(None)


def get_transcode_context() -> tuple[str | None, str | None]:
    """Get current transcode context.

    Returns:
        Tuple of (source_path, output_path), either may be None.
    """
    return _source_path.get(), _output_path.get()


@contextmanager
def transcode_context(
    source_path: Path | str,
    output_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager tagging log records with the file being transcoded.

    Restores the previous context on exit, so nested runs are safe.

    Example:
        with transcode_context("/videos/in.mov", "/videos/out.mp4"):
            logger.info("Starting")  # record carries source_path/output_path
    """
    old_source = _source_path.get()
    old_output = _output_path.get()
    try:
        set_transcode_context(source_path, output_path)
        yield
    finally:
        _source_path.set(old_source)
        _output_path.set(old_output)


class TranscodeContextFilter(logging.Filter):
    """Logging filter that injects transcode context into log records.

    Adds source_path and output_path attributes for JSON output, and a
    compact ``source_tag`` like ``[in.mov] `` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        source_path, output_path = get_transcode_context()

        record.source_path = source_path
        record.output_path = output_path
        record.source_tag = f"[{Path(source_path).name}] " if source_path else ""

        return True  # Never filter out records
