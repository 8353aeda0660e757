"""CLI probe command for vtranscode."""

import json
import logging
from pathlib import Path

import click

from vtranscode.cli.exit_codes import ExitCode
from vtranscode.cli.output import error_exit
from vtranscode.cli.transcode import load_cli_config
from vtranscode.introspector import (
    FFprobeIntrospector,
    MediaIntrospectionError,
    MovieMetadata,
)

logger = logging.getLogger(__name__)


def format_human(metadata: MovieMetadata) -> str:
    """Format metadata for terminal display."""
    lines = [f"File: {metadata.path}", f"Valid: {'yes' if metadata.valid else 'no'}"]
    lines.append(f"Duration: {metadata.duration:.2f}s")
    fields = [
        ("Container", metadata.container),
        ("Resolution", metadata.resolution),
        ("Rotation", metadata.rotation),
        ("Aspect ratio", _format_aspect(metadata.calculated_aspect_ratio)),
        ("Video codec", metadata.video_codec),
        ("Audio codec", metadata.audio_codec),
        ("Frame rate", metadata.frame_rate),
        ("Bitrate", metadata.bitrate),
    ]
    for label, value in fields:
        if value is not None:
            lines.append(f"{label}: {value}")
    return "\n".join(lines)


def _format_aspect(value: float | None) -> str | None:
    return f"{value:.4f}" if value is not None else None


@click.command("probe")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def probe_command(ctx: click.Context, file: Path, json_output: bool) -> None:
    """Probe FILE with ffprobe and show the metadata used for transcoding.

    Exits with INVALID_MEDIA (50) when the file is not usable media.
    """
    config = load_cli_config(ctx, json_output)
    try:
        metadata = FFprobeIntrospector(ffprobe_path=config.tools.ffprobe).probe(file)
    except MediaIntrospectionError as e:
        code = ExitCode.TARGET_NOT_FOUND
        if file.exists():
            code = ExitCode.TOOL_NOT_AVAILABLE
        error_exit(str(e), code, json_output)

    if json_output:
        click.echo(json.dumps(metadata.to_dict(), indent=2))
    else:
        click.echo(format_human(metadata))

    if not metadata.valid:
        ctx.exit(ExitCode.INVALID_MEDIA)
