"""vtranscode: drive ffmpeg with progress reporting, an idle-timeout
watchdog and output validation.

Example:
    import vtranscode

    result = vtranscode.transcode(
        "input.mov",
        "output.mp4",
        {"vcodec": "libx264", "resolution": "1280x720"},
        preserve_aspect_ratio="width",
        progress_callback=print,
    )
"""

from vtranscode.api import build_request, screenshot, transcode
from vtranscode.exceptions import (
    HungProcessError,
    InvalidRequestError,
    TranscodeError,
    TranscodeProcessError,
    ValidationFailureError,
)
from vtranscode.executor.transcode import (
    AspectRatioMode,
    EncodingRequest,
    RawOptions,
    StructuredOptions,
    TranscodeArtifact,
    TranscodeExecutor,
    TranscodeResult,
)
from vtranscode.introspector import (
    FFprobeIntrospector,
    MediaIntrospectionError,
    MovieMetadata,
)

__all__ = [
    "AspectRatioMode",
    "EncodingRequest",
    "FFprobeIntrospector",
    "HungProcessError",
    "InvalidRequestError",
    "MediaIntrospectionError",
    "MovieMetadata",
    "RawOptions",
    "StructuredOptions",
    "TranscodeArtifact",
    "TranscodeError",
    "TranscodeExecutor",
    "TranscodeProcessError",
    "TranscodeResult",
    "ValidationFailureError",
    "build_request",
    "screenshot",
    "transcode",
]
