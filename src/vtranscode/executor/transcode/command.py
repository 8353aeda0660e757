"""FFmpeg command building for transcoding.

The command is built as an argv list and never run through a shell; the
shell-escaped rendering is kept for logs and error messages only.
"""

from __future__ import annotations

import glob
import re
import shlex
from pathlib import Path

from .types import EncodingOptions

# printf-style sequence placeholder, e.g. frame-%03d.png
SEQUENCE_PLACEHOLDER = re.compile(r"%\d*d")


def build_transcode_command(
    ffmpeg_path: str,
    source_path: Path | str,
    options: EncodingOptions,
    output_path: Path | str,
) -> list[str]:
    """Build the ffmpeg argv for one transcode.

    Args:
        ffmpeg_path: ffmpeg executable.
        source_path: Input file.
        options: Encoding options placed between input and output.
        output_path: Output file or sequence pattern.

    Returns:
        ``[ffmpeg, "-y", "-i", source, *options, output]``.
    """
    return [
        str(ffmpeg_path),
        "-y",
        "-i",
        str(source_path),
        *options.to_args(),
        str(output_path),
    ]


def format_command(argv: list[str]) -> str:
    """Render argv as a shell-escaped command line."""
    return shlex.join(argv)


def has_sequence_placeholder(output_path: str) -> bool:
    return SEQUENCE_PLACEHOLDER.search(output_path) is not None


def expand_output_paths(output_path: str) -> list[Path]:
    """Resolve an output path into the files it denotes.

    A path with a sequence placeholder is globbed with the placeholder as
    ``*`` and returns the sorted matches (possibly none). Any other path is
    returned as is, whether it exists or not.
    """
    if not has_sequence_placeholder(output_path):
        return [Path(output_path)]

    pattern = "*".join(
        glob.escape(part) for part in SEQUENCE_PLACEHOLDER.split(output_path)
    )
    return [Path(match) for match in sorted(glob.glob(pattern))]
