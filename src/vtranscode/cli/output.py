"""Result and error printing shared by the CLI commands."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn

import click

from .exit_codes import ExitCode


@dataclass
class CLIResult:
    """Outcome of a successful command.

    ``message`` is what a human sees; ``data`` is merged into the JSON
    document next to ``status`` and ``message``.
    """

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        document: dict[str, Any] = {
            "status": "completed" if self.success else "failed",
            "message": self.message,
            **self.data,
        }
        return json.dumps(document, indent=2, default=str)


def _code_name(code: ExitCode | int) -> str:
    return code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
    details: str | None = None,
) -> NoReturn:
    """Print an error to stderr and exit with ``code``.

    Args:
        message: One-line error description.
        code: Process exit status.
        json_output: Print a ``{"status": "failed", "error": ...}`` document.
        details: Extra text, e.g. the tail of the ffmpeg output.
    """
    if json_output:
        error: dict[str, Any] = {"code": _code_name(code), "message": message}
        if details:
            error["details"] = details
        click.echo(json.dumps({"status": "failed", "error": error}), err=True)
    else:
        click.echo(f"Error: {message}", err=True)
        if details:
            click.echo(details, err=True)

    sys.exit(int(code))


def success_output(result: CLIResult, json_output: bool = False) -> None:
    click.echo(result.to_json() if json_output else result.message)


def output_tail(output: str, lines: int = 10) -> str:
    """Return the last ``lines`` non-blank lines of tool output.

    ffmpeg rewrites its status line with carriage returns, so those count
    as line breaks too.
    """
    tail = [line for line in output.splitlines() if line.strip()][-lines:]
    return "\n".join(tail)
