"""Media metadata returned by introspection.

MovieMetadata is the view of a probed file that the transcode executor
relies on. Only ``duration``, ``rotation``, ``calculated_aspect_ratio`` and
``valid`` drive transcoding decisions; the remaining fields are informational.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class MovieMetadata:
    """Probed facts about a media file.

    This is a frozen dataclass; a re-probe produces a new instance.
    """

    path: Path
    """Path to the probed file."""

    duration: float = 0.0
    """Container duration in seconds. 0.0 when unknown or invalid."""

    rotation: int | None = None
    """Display rotation of the first video stream (0, 90, 180 or 270)."""

    calculated_aspect_ratio: float | None = None
    """Display aspect ratio of the first video stream as width / height."""

    valid: bool = True
    """False when ffprobe reported an error or an unsupported codec."""

    container: str | None = None
    bitrate: int | None = None
    width: int | None = None
    height: int | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    frame_rate: str | None = None

    @property
    def resolution(self) -> str | None:
        """Resolution formatted as WIDTHxHEIGHT, or None if unknown."""
        if self.width is None or self.height is None:
            return None
        return f"{self.width}x{self.height}"

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "path": str(self.path),
            "valid": self.valid,
            "duration": self.duration,
            "rotation": self.rotation,
            "calculated_aspect_ratio": self.calculated_aspect_ratio,
            "container": self.container,
            "bitrate": self.bitrate,
            "resolution": self.resolution,
            "video_codec": self.video_codec,
            "audio_codec": self.audio_codec,
            "frame_rate": self.frame_rate,
        }
