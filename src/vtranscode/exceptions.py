"""Exceptions raised by transcode operations.

Every externally visible failure of a transcode derives from TranscodeError,
so callers can catch all of them with a single except clause. Each failure
raised after the child process was spawned carries the command line and the
accumulated ffmpeg output for diagnostics.
"""

from __future__ import annotations


class TranscodeError(Exception):
    """Base exception for transcode failures."""


class InvalidRequestError(TranscodeError):
    """Raised when an encoding request is malformed.

    Raised at construction time, before any process is spawned.
    """


class _ProcessFailure(TranscodeError):
    """Failure observed after ffmpeg was started."""

    def __init__(self, message: str, command: str = "", output: str = "") -> None:
        self.command = command
        self.output = output
        super().__init__(message)


class HungProcessError(_ProcessFailure):
    """Raised when ffmpeg produced no output within the idle timeout.

    Attributes:
        timeout_seconds: The idle window that was exceeded.
        command: Command line that was running.
        output: Output accumulated before the process was killed.
    """

    def __init__(
        self,
        timeout_seconds: float,
        command: str = "",
        output: str = "",
    ) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Process hung: no output for {timeout_seconds}s. Full output: {output}",
            command=command,
            output=output,
        )


class TranscodeProcessError(_ProcessFailure):
    """Raised when ffmpeg exited non-zero or terminated without a clean exit.

    Attributes:
        exit_code: Exit status, or None if the process never exited normally.
        command: Command line that was run.
        output: Accumulated ffmpeg output.
    """

    def __init__(
        self,
        exit_code: int | None,
        command: str = "",
        output: str = "",
        message: str | None = None,
    ) -> None:
        self.exit_code = exit_code
        if message is None:
            if exit_code is not None:
                message = (
                    f"Transcoding failed with exit code: {exit_code}. "
                    f"Command was: '{command}'"
                )
            else:
                message = (
                    "Transcoding failed as the process was terminated "
                    f"prematurely. Command was: '{command}'"
                )
        super().__init__(message, command=command, output=output)


class ValidationFailureError(_ProcessFailure):
    """Raised when ffmpeg succeeded but the output did not validate.

    Attributes:
        reasons: Human-readable reasons, e.g. "no output file created".
        command: Command line that was run.
        output: Accumulated ffmpeg output.
    """

    def __init__(
        self,
        reasons: list[str],
        command: str = "",
        output: str = "",
    ) -> None:
        self.reasons = list(reasons)
        super().__init__(
            f"Failed encoding. Errors: {', '.join(self.reasons)}. "
            f"Full output: {output}",
            command=command,
            output=output,
        )
