"""MediaIntrospector interface for media metadata extraction."""

from pathlib import Path
from typing import Protocol

from vtranscode.introspector.models import MovieMetadata


class MediaIntrospectionError(Exception):
    """Raised when a file cannot be introspected at all.

    Corrupt or unreadable media does not raise; it is reported through
    ``MovieMetadata.valid``. This error covers a missing file or a missing
    or broken ffprobe.
    """

    pass


class MediaIntrospector(Protocol):
    """Protocol for media introspection implementations."""

    def probe(self, path: Path) -> MovieMetadata:
        """Extract metadata from a media file.

        Args:
            path: Path to the media file.

        Returns:
            MovieMetadata describing the file. Invalid media is reported
            with ``valid=False`` rather than an exception.

        Raises:
            MediaIntrospectionError: If the file does not exist or the probe
                tool cannot be run.
        """
        ...
