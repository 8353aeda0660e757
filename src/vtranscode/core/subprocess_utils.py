"""Helpers for running ffmpeg and ffprobe as child processes.

``run_command`` runs a short-lived tool to completion and returns its decoded
output. ``iter_chunks`` splits a long-running child's output stream on a
sentinel token as the bytes arrive.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - only ffmpeg/ffprobe are invoked
import time
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any

logger = logging.getLogger(__name__)

# Bytes requested per read from a child's pipe
READ_SIZE = 4096


def run_command(
    args: list[str | Path], timeout: float = 120, **kwargs: Any
) -> tuple[Any, Any, int]:
    """Run ``args`` to completion and return ``(stdout, stderr, returncode)``.

    Output is captured and decoded as UTF-8, with undecodable bytes
    replaced; pass ``text=False`` to get the raw bytes instead. Extra keyword
    arguments go to ``subprocess.run`` and may override those defaults.

    Raises:
        subprocess.TimeoutExpired: After ``timeout`` seconds; the child has
            already been killed.
        OSError: If the executable cannot be started.
    """
    argv = [str(arg) for arg in args]
    tool = Path(argv[0]).name if argv else "unknown"
    kwargs.setdefault("capture_output", True)
    kwargs.setdefault("text", True)
    if kwargs["text"]:
        kwargs.setdefault("encoding", "utf-8")
        kwargs.setdefault("errors", "replace")
    empty = "" if kwargs["text"] else b""

    logger.debug("Running %s", " ".join(argv), extra={"command": tool})
    started = time.monotonic()
    try:
        completed = subprocess.run(argv, timeout=timeout, **kwargs)  # nosec B603
    except subprocess.TimeoutExpired:
        logger.warning(
            "%s did not finish within %ss",
            tool,
            timeout,
            extra={"command": tool, "timeout_seconds": timeout},
        )
        raise

    logger.debug(
        "%s exited with %d",
        tool,
        completed.returncode,
        extra={
            "command": tool,
            "returncode": completed.returncode,
            "elapsed_seconds": round(time.monotonic() - started, 3),
        },
    )
    return completed.stdout or empty, completed.stderr or empty, completed.returncode


def iter_chunks(stream: IO[bytes], sentinel: bytes) -> Iterator[bytes]:
    """Yield chunks of a binary stream, each ending with ``sentinel``.

    Reads whatever the pipe has available rather than whole lines, because
    ffmpeg rewrites its status line with carriage returns and never emits a
    newline between updates. The final chunk is yielded without a sentinel
    if the stream ends mid-chunk.

    Args:
        stream: Binary stream to read, typically ``process.stderr``.
        sentinel: Separator that terminates each chunk.

    Yields:
        Raw chunks, including the trailing sentinel.
    """
    if not sentinel:
        raise ValueError("sentinel must not be empty")

    read = getattr(stream, "read1", stream.read)
    buffer = b""
    while True:
        data = read(READ_SIZE)
        if not data:
            break
        buffer += data
        while True:
            index = buffer.find(sentinel)
            if index < 0:
                break
            end = index + len(sentinel)
            yield buffer[:end]
            buffer = buffer[end:]
    if buffer:
        yield buffer
