"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into MovieMetadata.
All functions are pure (no I/O, no side effects) for easy testing.
"""

import logging
import re
from pathlib import Path

from vtranscode.introspector.models import MovieMetadata

logger = logging.getLogger(__name__)

# "Unsupported codec with id 100359 for input stream 2"
UNSUPPORTED_CODEC_PATTERN = re.compile(
    r"Unsupported\scodec\swith\sid\s(\d+)\sfor\sinput\sstream\s(\d+)",
    re.IGNORECASE,
)

# Substrings in ffprobe stderr that always mark a file invalid
INVALID_STDERR_MARKERS = (
    "is not supported",
    "could not find codec parameters",
)


def parse_duration(value: str | None) -> float | None:
    """Parse duration string from ffprobe into seconds.

    Args:
        value: Duration string from ffprobe (e.g., "3600.000") or None.

    Returns:
        Duration in seconds as float, or None if parsing fails.
    """
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def parse_int(value: object) -> int | None:
    """Parse an integer field that ffprobe may report as a string."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def validate_positive_int(
    value: int | None,
    field_name: str,
    file_path: str | None = None,
) -> int | None:
    """Validate that a value is a positive integer or None.

    Args:
        value: Value to validate.
        field_name: Field name for warning messages.
        file_path: File path context for warnings.

    Returns:
        Validated value or None if invalid.
    """
    if value is None:
        return None
    if value < 0:
        context = f" in {file_path}" if file_path else ""
        logger.warning("Invalid negative %s: %d%s", field_name, value, context)
        return None
    return value


def parse_rotation(stream: dict) -> int | None:
    """Get the display rotation of a video stream in degrees.

    Older ffmpeg builds report rotation as a ``rotate`` tag; newer builds use
    a display matrix side data entry whose angle has the opposite sign.

    Args:
        stream: Video stream dictionary from ffprobe.

    Returns:
        Clockwise rotation normalized to [0, 360), or None if not reported.
    """
    tag_value = parse_int(stream.get("tags", {}).get("rotate"))
    if tag_value is not None:
        return tag_value % 360

    for side_data in stream.get("side_data_list", []) or []:
        matrix_value = parse_int(side_data.get("rotation"))
        if matrix_value is not None:
            return (-matrix_value) % 360

    return None


def _aspect_from_dar(dar: str | None) -> float | None:
    if not dar or ":" not in dar:
        return None
    width, _, height = dar.partition(":")
    try:
        aspect = float(width) / float(height)
    except (ValueError, ZeroDivisionError):
        return None
    return aspect or None


def _aspect_from_dimensions(width: int | None, height: int | None) -> float | None:
    if not width or not height:
        return None
    return width / height


def parse_aspect_ratio(stream: dict) -> float | None:
    """Calculate the display aspect ratio of a video stream.

    Prefers the display aspect ratio reported by ffprobe and falls back to
    the coded dimensions.

    Args:
        stream: Video stream dictionary from ffprobe.

    Returns:
        Width divided by height, or None if it cannot be determined.
    """
    from_dar = _aspect_from_dar(stream.get("display_aspect_ratio"))
    if from_dar is not None:
        return from_dar
    return _aspect_from_dimensions(
        parse_int(stream.get("width")), parse_int(stream.get("height"))
    )


def _find_stream(streams: list[dict], index: int) -> dict | None:
    for stream in streams:
        if stream.get("index") == index:
            return stream
    if 0 <= index < len(streams):
        return streams[index]
    return None


def has_unsupported_codec(stderr: str, streams: list[dict]) -> bool:
    """Check ffprobe stderr for codec errors that make a file unusable.

    ffprobe reports an unsupported codec for every stream it cannot decode,
    including data streams nobody cares about. Only an unsupported audio or
    video stream (or one that cannot be identified) marks the file invalid.

    Args:
        stderr: ffprobe stderr output.
        streams: Stream dictionaries from ffprobe.

    Returns:
        True if the file should be treated as invalid.
    """
    if "Unsupported codec" in stderr:
        for match in UNSUPPORTED_CODEC_PATTERN.finditer(stderr):
            stream = _find_stream(streams, int(match.group(2)))
            if stream is None or stream.get("codec_type") in ("video", "audio"):
                return True

    return any(marker in stderr for marker in INVALID_STDERR_MARKERS)


def parse_movie_metadata(path: Path, data: dict, stderr: str = "") -> MovieMetadata:
    """Parse ffprobe JSON output into MovieMetadata.

    Args:
        path: Path to the probed file.
        data: Parsed ffprobe JSON output.
        stderr: ffprobe stderr, scanned for codec errors.

    Returns:
        MovieMetadata for the file. ``valid`` is False when ffprobe reported
        an error, the output lacks streams or format, or stderr indicates an
        unsupported audio/video codec.
    """
    if "error" in data or "streams" not in data or "format" not in data:
        if "error" in data:
            logger.debug("ffprobe reported an error for %s: %s", path, data["error"])
        return MovieMetadata(path=path, duration=0.0, valid=False)

    streams = data.get("streams") or []
    format_info = data.get("format") or {}
    file_path = str(path)

    video_streams = [s for s in streams if s.get("codec_type") == "video"]
    audio_streams = [s for s in streams if s.get("codec_type") == "audio"]

    valid = not has_unsupported_codec(stderr, streams)

    video = video_streams[0] if video_streams else None
    audio = audio_streams[0] if audio_streams else None

    width = height = None
    rotation = None
    aspect_ratio = None
    frame_rate = None
    if video is not None:
        width = validate_positive_int(parse_int(video.get("width")), "width", file_path)
        height = validate_positive_int(
            parse_int(video.get("height")), "height", file_path
        )
        rotation = parse_rotation(video)
        aspect_ratio = parse_aspect_ratio(video)
        rate = video.get("avg_frame_rate") or video.get("r_frame_rate")
        if rate and rate != "0/0":
            frame_rate = rate

    return MovieMetadata(
        path=path,
        duration=parse_duration(format_info.get("duration")) or 0.0,
        rotation=rotation,
        calculated_aspect_ratio=aspect_ratio,
        valid=valid,
        container=format_info.get("format_name"),
        bitrate=parse_int(format_info.get("bit_rate")),
        width=width,
        height=height,
        video_codec=video.get("codec_name") if video is not None else None,
        audio_codec=audio.get("codec_name") if audio is not None else None,
        frame_rate=frame_rate,
    )
