"""Idle-timeout watchdog for blocking reads from a child process.

The watchdog runs a checker thread next to a blocking read loop. The reader
records the time of every chunk it receives; the checker polls that
timestamp and, once the idle window is exceeded, kills the child process.
Killing the child closes its end of the pipe, which unblocks the reader so it
can raise HungProcessError with whatever output it already collected.
"""

from __future__ import annotations

import contextvars
import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import Protocol, TypeVar

from vtranscode.exceptions import HungProcessError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 0.1


class Killable(Protocol):
    """Process handle the watchdog can forcibly terminate."""

    def kill(self) -> None: ...


class IdleTimeoutWatchdog:
    """Kill a process when its output stream stays idle for too long.

    A watchdog guards a single ``stream()`` call. The checker thread is
    started when streaming begins and stopped before ``stream()`` returns or
    raises, whatever the reason.

    Example:
        watchdog = IdleTimeoutWatchdog(process, timeout_seconds=30)
        watchdog.stream(iter_chunks(process.stderr, b"size="), handle_chunk)
    """

    def __init__(
        self,
        process: Killable,
        timeout_seconds: float,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the watchdog.

        Args:
            process: Process to kill when the stream goes idle.
            timeout_seconds: Maximum seconds allowed between chunks.
            poll_interval: Seconds between idle checks.
        """
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self.process = process
        self.timeout_seconds = timeout_seconds
        self.poll_interval = poll_interval

        self._lock = threading.Lock()
        self._last_activity = time.monotonic()
        self._stop = threading.Event()
        self._expired = threading.Event()
        self._kill_error: BaseException | None = None
        self._checker: threading.Thread | None = None

    @property
    def expired(self) -> bool:
        """True once the idle timeout fired and the process was killed."""
        return self._expired.is_set()

    @property
    def running(self) -> bool:
        """True while the checker thread is alive."""
        return self._checker is not None and self._checker.is_alive()

    def touch(self) -> None:
        """Record activity, resetting the idle window."""
        with self._lock:
            self._last_activity = time.monotonic()

    def idle_seconds(self) -> float:
        """Seconds since the last recorded activity."""
        with self._lock:
            last = self._last_activity
        return time.monotonic() - last

    def stream(self, chunks: Iterable[T], consumer: Callable[[T], None]) -> None:
        """Feed chunks to ``consumer`` while enforcing the idle timeout.

        Args:
            chunks: Blocking source of chunks, usually wrapping a pipe.
            consumer: Called with every chunk in order.

        Raises:
            HungProcessError: If the idle timeout expired and the process
                was killed.
            OSError: If the process could not be killed.
        """
        self.touch()
        self._start()
        try:
            for chunk in chunks:
                if self.expired:
                    break
                self.touch()
                consumer(chunk)
        finally:
            self._shutdown()

        if self._kill_error is not None:
            raise self._kill_error
        if self.expired:
            raise HungProcessError(self.timeout_seconds)

    def _start(self) -> None:
        self._stop.clear()
        # Checker records carry the caller's transcode context
        context = contextvars.copy_context()
        self._checker = threading.Thread(
            target=context.run,
            args=(self._check_loop,),
            name="idle-timeout-watchdog",
            daemon=True,
        )
        self._checker.start()

    def _shutdown(self) -> None:
        self._stop.set()
        if self._checker is not None:
            self._checker.join()

    def _check_loop(self) -> None:
        while not self._stop.wait(self.poll_interval):
            idle = self.idle_seconds()
            if idle > self.timeout_seconds:
                self._fire(idle)
                return

    def _fire(self, idle: float) -> None:
        logger.warning(
            "No output for %.1fs (limit %ss), killing process",
            idle,
            self.timeout_seconds,
            extra={"idle_seconds": round(idle, 3), "timeout": self.timeout_seconds},
        )
        self._expired.set()
        try:
            self.process.kill()
        except ProcessLookupError:
            # Already exited between the last chunk and the kill
            pass
        except OSError as e:
            logger.error("Failed to kill hung process: %s", e)
            self._kill_error = e


def iter_with_idle_timeout(
    chunks: Iterable[T],
    consumer: Callable[[T], None],
    process: Killable,
    timeout_seconds: float | None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """Consume chunks, guarded by a watchdog when a timeout is configured.

    Args:
        chunks: Blocking source of chunks.
        consumer: Called with every chunk in order.
        process: Process to kill when the stream goes idle.
        timeout_seconds: Idle timeout. None or a non-positive value disables
            the watchdog and consumes the source directly.
        poll_interval: Seconds between idle checks.

    Raises:
        HungProcessError: If the idle timeout expired.
    """
    if timeout_seconds is None or timeout_seconds <= 0:
        for chunk in chunks:
            consumer(chunk)
        return

    watchdog = IdleTimeoutWatchdog(process, timeout_seconds, poll_interval)
    watchdog.stream(chunks, consumer)
