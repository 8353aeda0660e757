"""CLI transcode command for vtranscode."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click

from vtranscode.cli.exit_codes import ExitCode
from vtranscode.cli.output import CLIResult, error_exit, output_tail, success_output
from vtranscode.config import TomlParseError, VTranscodeConfig, get_config
from vtranscode.exceptions import (
    HungProcessError,
    InvalidRequestError,
    TranscodeProcessError,
    ValidationFailureError,
)
from vtranscode.executor.transcode import TranscodeResult
from vtranscode.introspector import MediaIntrospectionError
from vtranscode.presets import Preset, PresetValidationError, get_preset

logger = logging.getLogger(__name__)

# Resolution of the progress bar
PROGRESS_STEPS = 1000

_BOOL_VALUES = {"true": True, "false": False}


def parse_set_options(values: tuple[str, ...]) -> dict[str, Any] | None:
    """Parse repeated ``--set KEY=VALUE`` options into a mapping.

    ``true``/``false`` become booleans, so ``--set an=true`` emits ``-an``.

    Raises:
        click.BadParameter: If an entry has no ``=``.
    """
    if not values:
        return None
    options: dict[str, Any] = {}
    for entry in values:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise click.BadParameter(
                f"Expected KEY=VALUE, got '{entry}'", param_hint="--set"
            )
        options[key.strip()] = _BOOL_VALUES.get(value.strip().lower(), value)
    return options


def load_cli_config(
    ctx: click.Context,
    json_output: bool = False,
    **overrides: Any,
) -> VTranscodeConfig:
    """Load configuration, exiting with CONFIG_ERROR when it is invalid."""
    config_path = (ctx.obj or {}).get("config_path")
    try:
        return get_config(config_path=config_path, **overrides)
    except (TomlParseError, ValueError) as e:
        error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR, json_output)


def load_cli_preset(
    name: str | None,
    presets_file: Path | None,
    config: VTranscodeConfig,
    json_output: bool = False,
) -> Preset | None:
    """Resolve ``--preset`` against the presets file."""
    if name is None:
        return None
    path = presets_file or config.presets_file
    if path is None:
        error_exit(
            "--preset requires --presets-file or a configured presets file",
            ExitCode.PRESET_ERROR,
            json_output,
        )
    try:
        return get_preset(path, name)
    except (PresetValidationError, FileNotFoundError) as e:
        error_exit(str(e), ExitCode.PRESET_ERROR, json_output)


@contextmanager
def progress_reporter(
    label: str, enabled: bool = True
) -> Iterator[Callable[[float], None] | None]:
    """Yield a progress callback driving a click progress bar.

    Yields None when progress display is disabled.
    """
    if not enabled:
        yield None
        return

    with click.progressbar(
        length=PROGRESS_STEPS, label=label, file=sys.stderr
    ) as bar:

        def update(fraction: float) -> None:
            target = int(min(max(fraction, 0.0), 1.0) * PROGRESS_STEPS)
            if target > bar.pos:
                bar.update(target - bar.pos)

        yield update


def run_transcode_command(
    action: Callable[[Callable[[float], None] | None], TranscodeResult | None],
    *,
    label: str,
    json_output: bool,
    show_progress: bool,
) -> TranscodeResult | None:
    """Run a transcode, mapping failures to exit codes."""
    try:
        with progress_reporter(label, enabled=show_progress and not json_output) as cb:
            return action(cb)
    except InvalidRequestError as e:
        error_exit(str(e), ExitCode.INVALID_REQUEST, json_output)
    except MediaIntrospectionError as e:
        error_exit(str(e), ExitCode.TARGET_NOT_FOUND, json_output)
    except HungProcessError as e:
        error_exit(
            f"ffmpeg produced no output for {e.timeout_seconds}s and was killed",
            ExitCode.PROCESS_HUNG,
            json_output,
            details=output_tail(e.output),
        )
    except ValidationFailureError as e:
        error_exit(
            f"Failed encoding: {', '.join(e.reasons)}",
            ExitCode.VALIDATION_FAILED,
            json_output,
            details=output_tail(e.output),
        )
    except TranscodeProcessError as e:
        error_exit(
            str(e),
            ExitCode.TRANSCODE_FAILED,
            json_output,
            details=output_tail(e.output),
        )
    except KeyboardInterrupt:
        error_exit("Interrupted, ffmpeg was stopped", ExitCode.INTERRUPTED, json_output)


def report_result(
    result: TranscodeResult | None,
    source: Path,
    output: str,
    json_output: bool,
) -> None:
    """Print the outcome of a successful transcode."""
    if result is None:
        success_output(
            CLIResult(
                success=True,
                message=f"Transcoded {source} to {output} (not validated)",
            ),
            json_output,
        )
        return

    data = {
        "command": result.command,
        "artifacts": [
            {
                "path": str(artifact.path),
                "valid": artifact.valid,
                "duration": artifact.metadata.duration,
            }
            for artifact in result.artifacts
        ],
    }
    lines = [f"Transcoded {source} to {output}"]
    lines += [f"  {artifact.path}" for artifact in result.artifacts]
    success_output(
        CLIResult(success=True, message="\n".join(lines), data=data),
        json_output,
    )


@click.command("transcode")
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("output")
@click.option(
    "--options",
    "-o",
    "raw_options",
    default=None,
    help='Raw ffmpeg options, e.g. "-vcodec libx264 -s 1280x720".',
)
@click.option(
    "--set",
    "set_options",
    multiple=True,
    metavar="KEY=VALUE",
    help="Set one ffmpeg option (flag name without dash). Repeatable.",
)
@click.option("--preset", "-p", default=None, help="Named preset to apply.")
@click.option(
    "--presets-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="YAML presets file (overrides configuration).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Idle timeout in seconds; 0 disables (default: 30).",
)
@click.option(
    "--no-validate", is_flag=True, help="Skip re-probing the output file(s)."
)
@click.option(
    "--autorotate", is_flag=True, help="Bake the source rotation into the output."
)
@click.option(
    "--preserve-aspect-ratio",
    type=click.Choice(["width", "height"], case_sensitive=False),
    default=None,
    help="Keep the requested width or height and recompute the other.",
)
@click.option("--no-progress", is_flag=True, help="Do not show a progress bar.")
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON.")
@click.pass_context
def transcode_command(
    ctx: click.Context,
    source: Path,
    output: str,
    raw_options: str | None,
    set_options: tuple[str, ...],
    preset: str | None,
    presets_file: Path | None,
    timeout: float | None,
    no_validate: bool,
    autorotate: bool,
    preserve_aspect_ratio: str | None,
    no_progress: bool,
    json_output: bool,
) -> None:
    """Transcode SOURCE into OUTPUT with ffmpeg.

    OUTPUT may contain a sequence placeholder such as frame-%03d.png, in
    which case every produced file is validated.
    """
    from vtranscode.api import transcode

    if raw_options is not None and set_options:
        error_exit(
            "--options and --set cannot be combined",
            ExitCode.INVALID_REQUEST,
            json_output,
        )
    if not source.exists():
        error_exit(f"File not found: {source}", ExitCode.TARGET_NOT_FOUND, json_output)

    options = raw_options if raw_options is not None else parse_set_options(set_options)
    config = load_cli_config(ctx, json_output)
    selected = load_cli_preset(preset, presets_file, config, json_output)

    result = run_transcode_command(
        lambda progress: transcode(
            source,
            output,
            options,
            progress_callback=progress,
            config=config,
            preset=selected,
            autorotate=True if autorotate else None,
            preserve_aspect_ratio=preserve_aspect_ratio,
            validate=False if no_validate else None,
            timeout_seconds=timeout,
        ),
        label=f"Transcoding {source.name}",
        json_output=json_output,
        show_progress=not no_progress,
    )
    report_result(result, source, output, json_output)
