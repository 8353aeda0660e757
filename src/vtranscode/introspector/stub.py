"""Stub implementation of MediaIntrospector for development and testing."""

from pathlib import Path

from vtranscode.introspector.interface import MediaIntrospectionError
from vtranscode.introspector.models import MovieMetadata


class StubIntrospector:
    """Stub implementation that returns registered or placeholder metadata.

    Files registered with ``register()`` return their registered metadata.
    Any other existing file is reported as valid with the default duration;
    a missing file raises like the real introspector does.
    """

    def __init__(self, default_duration: float = 10.0) -> None:
        self.default_duration = default_duration
        self._registered: dict[Path, MovieMetadata] = {}
        self.probed: list[Path] = []

    def register(self, metadata: MovieMetadata) -> None:
        """Register metadata to return for ``metadata.path``."""
        self._registered[Path(metadata.path)] = metadata

    def probe(self, path: Path) -> MovieMetadata:
        """Return metadata for a file without running ffprobe.

        Args:
            path: Path to the media file.

        Returns:
            Registered metadata, or valid placeholder metadata.

        Raises:
            MediaIntrospectionError: If the file is neither registered nor
                present on disk.
        """
        path = Path(path)
        self.probed.append(path)

        registered = self._registered.get(path)
        if registered is not None:
            return registered

        if not path.exists():
            raise MediaIntrospectionError(f"the file '{path}' does not exist")

        return MovieMetadata(path=path, duration=self.default_duration, valid=True)
