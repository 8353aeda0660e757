"""Reading stream and container facts from media files.

FFprobeIntrospector shells out to ffprobe and returns MovieMetadata;
StubIntrospector serves canned metadata in tests. Both satisfy the
MediaIntrospector protocol and raise MediaIntrospectionError on failure.
"""

from vtranscode.introspector.ffprobe import FFprobeIntrospector
from vtranscode.introspector.interface import (
    MediaIntrospectionError,
    MediaIntrospector,
)
from vtranscode.introspector.models import MovieMetadata
from vtranscode.introspector.stub import StubIntrospector

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospectionError",
    "MediaIntrospector",
    "MovieMetadata",
    "StubIntrospector",
]
