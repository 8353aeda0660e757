"""CLI screenshot command for vtranscode."""

from pathlib import Path

import click

from vtranscode.cli.exit_codes import ExitCode
from vtranscode.cli.output import error_exit
from vtranscode.cli.transcode import (
    load_cli_config,
    parse_set_options,
    report_result,
    run_transcode_command,
)


@click.command("screenshot")
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("output")
@click.option(
    "--seek",
    type=click.FloatRange(min=0),
    default=None,
    help="Position in seconds to grab the frame from.",
)
@click.option(
    "--set",
    "set_options",
    multiple=True,
    metavar="KEY=VALUE",
    help="Set one ffmpeg option (flag name without dash). Repeatable.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Idle timeout in seconds; 0 disables.",
)
@click.option(
    "--preserve-aspect-ratio",
    type=click.Choice(["width", "height"], case_sensitive=False),
    default=None,
    help="Keep the requested width or height and recompute the other.",
)
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON.")
@click.pass_context
def screenshot_command(
    ctx: click.Context,
    source: Path,
    output: str,
    seek: float | None,
    set_options: tuple[str, ...],
    timeout: float | None,
    preserve_aspect_ratio: str | None,
    json_output: bool,
) -> None:
    """Grab one frame of SOURCE into the image OUTPUT."""
    from vtranscode.api import screenshot

    if not source.exists():
        error_exit(f"File not found: {source}", ExitCode.TARGET_NOT_FOUND, json_output)

    config = load_cli_config(ctx, json_output)
    options = parse_set_options(set_options)

    result = run_transcode_command(
        lambda progress: screenshot(
            source,
            output,
            seek_time=seek,
            options=options,
            progress_callback=progress,
            config=config,
            preserve_aspect_ratio=preserve_aspect_ratio,
            timeout_seconds=timeout,
        ),
        label=f"Screenshot of {source.name}",
        json_output=json_output,
        show_progress=False,
    )
    report_result(result, source, output, json_output)
