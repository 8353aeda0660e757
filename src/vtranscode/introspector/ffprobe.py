"""FFprobe-based implementation of MediaIntrospector protocol."""

import json
import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from vtranscode.core.string_utils import repair_encoding
from vtranscode.core.subprocess_utils import run_command
from vtranscode.introspector.interface import MediaIntrospectionError
from vtranscode.introspector.models import MovieMetadata
from vtranscode.introspector.parsers import parse_movie_metadata

logger = logging.getLogger(__name__)


class FFprobeIntrospector:
    """ffprobe-based implementation of MediaIntrospector protocol.

    Probes files with ``-show_format -show_streams -show_error`` and reports
    corrupt or unsupported media through ``MovieMetadata.valid``.
    """

    def __init__(self, ffprobe_path: Path | str | None = None, timeout: int = 60):
        """Initialize the introspector.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                uses the path from configuration or system PATH.
            timeout: Seconds before a probe is abandoned.
        """
        self._ffprobe_path = str(ffprobe_path or self._get_configured_path())
        self._timeout = timeout

    @staticmethod
    def _get_configured_path() -> str:
        from vtranscode.executor.interface import get_tool_path

        return get_tool_path("ffprobe")

    def probe(self, path: Path) -> MovieMetadata:
        """Extract metadata from a media file.

        Args:
            path: Path to the media file.

        Returns:
            MovieMetadata for the file.

        Raises:
            MediaIntrospectionError: If the file does not exist or ffprobe
                cannot be run.
        """
        path = Path(path)
        if not path.exists():
            raise MediaIntrospectionError(f"the file '{path}' does not exist")

        try:
            raw_stdout, raw_stderr, _ = run_command(
                [
                    self._ffprobe_path,
                    "-i",
                    path,
                    "-print_format",
                    "json",
                    "-show_format",
                    "-show_streams",
                    "-show_error",
                ],
                timeout=self._timeout,
                text=False,
            )
        except subprocess.TimeoutExpired as e:
            raise MediaIntrospectionError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise MediaIntrospectionError(
                f"ffprobe could not be run ({self._ffprobe_path}): {e}"
            ) from e

        # Container tags are echoed verbatim and need not be UTF-8
        stdout = repair_encoding(raw_stdout)
        stderr = repair_encoding(raw_stderr)

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            logger.warning("Invalid ffprobe output for %s: %s", path, e)
            return MovieMetadata(path=path, duration=0.0, valid=False)

        if not isinstance(data, dict):
            return MovieMetadata(path=path, duration=0.0, valid=False)

        return parse_movie_metadata(path, data, stderr)
