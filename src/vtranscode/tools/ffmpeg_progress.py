"""FFmpeg progress parsing utilities.

FFmpeg reports progress on stderr as status lines such as:

    frame= 4855 fps= 46 q=31.0 size=   45306kB time=00:02:42.28 bitrate=2287.0kbits/

Each status update is preceded by ``size=``, which is used to split the
stream into chunks. Parsing is best-effort: malformed input yields zero
elapsed time rather than an error.
"""

import re

from vtranscode.core.string_utils import repair_encoding

# Token that precedes every status update on ffmpeg's stderr
PROGRESS_SENTINEL = b"size="

# ffmpeg 0.8 and later: time=HH:MM:SS.ff
TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+(?:\.\d+)?)")


def has_time_field(line: str) -> bool:
    """Check whether a stderr chunk carries a ``time=`` field."""
    return "time=" in line


def parse_elapsed_seconds(line: str | bytes) -> float:
    """Extract the elapsed output time from an ffmpeg status line.

    Args:
        line: A chunk of ffmpeg stderr output.

    Returns:
        Elapsed seconds (H*3600 + M*60 + S), or 0.0 if the line has no
        well-formed time field.
    """
    match = TIME_PATTERN.search(repair_encoding(line))
    if match is None:
        return 0.0
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def compute_progress(line: str | bytes, duration: float | None) -> float:
    """Convert an ffmpeg status line into a completion fraction.

    The result is not clamped; ffmpeg can briefly report a time past the
    probed duration.

    Args:
        line: A chunk of ffmpeg stderr output.
        duration: Total duration of the source in seconds.

    Returns:
        Elapsed time divided by duration, or 0.0 if either is unknown.
    """
    if duration is None or duration <= 0:
        return 0.0
    return parse_elapsed_seconds(line) / duration
