"""Transcode executor: runs ffmpeg for one EncodingRequest.

A run derives extra options from the source metadata, spawns ffmpeg, streams
its stderr through the progress parser (guarded by the idle-timeout
watchdog), classifies the exit status and finally re-probes the output.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg execution
from collections.abc import Callable
from pathlib import Path

from vtranscode.core.string_utils import repair_encoding
from vtranscode.core.subprocess_utils import iter_chunks
from vtranscode.core.watchdog import DEFAULT_POLL_INTERVAL, iter_with_idle_timeout
from vtranscode.exceptions import (
    HungProcessError,
    TranscodeProcessError,
    ValidationFailureError,
)
from vtranscode.executor.interface import get_tool_path
from vtranscode.introspector.interface import MediaIntrospector
from vtranscode.logging import transcode_context
from vtranscode.tools.ffmpeg_progress import (
    PROGRESS_SENTINEL,
    compute_progress,
    has_time_field,
)

from .command import build_transcode_command, expand_output_paths, format_command
from .decisions import derive_aspect_options, derive_rotation_options
from .types import (
    EncodingOptions,
    EncodingRequest,
    OptionDelta,
    TranscodeArtifact,
    TranscodeResult,
    TranscodeState,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

NO_OUTPUT_REASON = "no output file created"
INVALID_OUTPUT_REASON = "encoded file is invalid"


def _ignore_progress(_: float) -> None:
    pass


class TranscodeExecutor:
    """Runs a single EncodingRequest through ffmpeg.

    An executor is single-use: ``run()`` may be called once. Use separate
    instances for concurrent transcodes.

    Attributes:
        request: The request being executed.
        state: Current TranscodeState.
        options: Effective options after rotation and aspect derivation.
        command: Shell-escaped command line, set once the run starts.
        artifacts: Re-probed outputs, set by validation.
    """

    def __init__(
        self,
        request: EncodingRequest,
        ffmpeg_path: Path | str | None = None,
        introspector: MediaIntrospector | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the executor.

        Args:
            request: What to transcode.
            ffmpeg_path: Explicit ffmpeg executable. Defaults to the
                configured path or the system PATH.
            introspector: Used to re-probe outputs. Defaults to ffprobe.
            poll_interval: Seconds between watchdog idle checks.
        """
        self.request = request
        self.ffmpeg_path = str(ffmpeg_path or get_tool_path("ffmpeg"))
        if introspector is None:
            from vtranscode.introspector import FFprobeIntrospector

            introspector = FFprobeIntrospector()
        self.introspector = introspector
        self.poll_interval = poll_interval

        self.state = TranscodeState.IDLE
        self.options: EncodingOptions = request.options
        self.argv: list[str] = []
        self.command = ""
        self.artifacts: list[TranscodeArtifact] | None = None
        self._output_parts: list[str] = []

    @property
    def output(self) -> str:
        """ffmpeg stderr accumulated so far."""
        return "".join(self._output_parts)

    def derive_options(self) -> EncodingOptions:
        """Apply rotation correction and aspect preservation to the options."""
        source = self.request.source
        delta = OptionDelta()
        if self.request.autorotate:
            delta = derive_rotation_options(source)
        delta = delta.combine(
            derive_aspect_options(
                source,
                self.request.options,
                self.request.preserve_aspect_ratio,
                swapped=delta.swaps_orientation,
            )
        )
        if delta.is_empty:
            return self.request.options
        logger.debug(
            "Derived options for %s",
            source.path,
            extra={
                "video_filters": list(delta.video_filters),
                "width": delta.width,
                "height": delta.height,
            },
        )
        return self.request.options.with_updates(delta)

    def run(
        self, progress_callback: ProgressCallback | None = None
    ) -> TranscodeResult | None:
        """Run the transcode.

        Args:
            progress_callback: Called with 0.0 once ffmpeg started, with the
                parsed fraction for every status update, and with 1.0 after
                successful validation. Values are not clamped.

        Returns:
            TranscodeResult with the validated artifacts, or None when the
            request disabled validation.

        Raises:
            HungProcessError: If ffmpeg stopped producing output.
            TranscodeProcessError: If ffmpeg could not start, exited
                non-zero or was terminated by a signal.
            ValidationFailureError: If the output is missing or invalid.
            RuntimeError: If the executor was already run.
        """
        if self.state is not TranscodeState.IDLE:
            raise RuntimeError("TranscodeExecutor.run() may only be called once")

        emit = progress_callback or _ignore_progress
        source = self.request.source

        with transcode_context(source.path, self.request.output_path):
            try:
                self.state = TranscodeState.DERIVING
                self.options = self.derive_options()
                self.argv = build_transcode_command(
                    self.ffmpeg_path,
                    source.path,
                    self.options,
                    self.request.output_path,
                )
                self.command = format_command(self.argv)
                logger.info("Running transcoding: %s", self.command)

                self._transcode(emit)

                if not self.request.validate:
                    self.state = TranscodeState.SUCCEEDED
                    logger.info(
                        "Transcoding of %s to %s finished (not validated)",
                        source.path,
                        self.request.output_path,
                    )
                    return None

                return self._validate(emit)
            except Exception:
                self.state = TranscodeState.FAILED
                raise

    def _transcode(self, emit: ProgressCallback) -> None:
        """Spawn ffmpeg, stream its stderr and classify the exit status."""
        self.state = TranscodeState.SPAWNED
        try:
            process = subprocess.Popen(  # nosec B603 - argv list, no shell
                self.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not start ffmpeg: %s", e)
            raise TranscodeProcessError(
                None,
                command=self.command,
                message=f"Could not start ffmpeg: {e}. Command was: '{self.command}'",
            ) from e

        duration = self.request.source.duration

        def handle_chunk(chunk: bytes) -> None:
            line = repair_encoding(chunk)
            self._output_parts.append(line)
            if has_time_field(line):
                emit(compute_progress(line, duration))

        try:
            self.state = TranscodeState.STREAMING
            emit(0.0)
            iter_with_idle_timeout(
                iter_chunks(process.stderr, PROGRESS_SENTINEL),
                handle_chunk,
                process,
                self.request.timeout_seconds,
                self.poll_interval,
            )
        except HungProcessError as e:
            self.state = TranscodeState.TIMED_OUT
            process.wait()
            logger.error(
                "Process hung...\nCommand\n%s\nOutput\n%s",
                self.command,
                self.output,
                extra={"timeout_seconds": e.timeout_seconds},
            )
            raise HungProcessError(
                e.timeout_seconds, command=self.command, output=self.output
            ) from e
        except BaseException:
            _kill(process)
            raise
        finally:
            process.stderr.close()

        returncode = process.wait()
        self.state = TranscodeState.EXITED

        if returncode != 0:
            # Negative return codes mean the process was killed by a signal
            exit_code = returncode if returncode > 0 else None
            error = TranscodeProcessError(
                exit_code, command=self.command, output=self.output
            )
            logger.error("%s", error, extra={"returncode": returncode})
            raise error

    def _validate(self, emit: ProgressCallback) -> TranscodeResult:
        """Re-probe the output file(s) and build the result."""
        self.state = TranscodeState.VALIDATING
        paths = expand_output_paths(self.request.output_path)

        reasons: list[str] = []
        artifacts: list[TranscodeArtifact] = []
        if not paths:
            reasons.append(NO_OUTPUT_REASON)
        for path in paths:
            if not path.exists():
                reasons.append(NO_OUTPUT_REASON)
                continue
            metadata = self.introspector.probe(path)
            artifacts.append(TranscodeArtifact(path, metadata.valid, metadata))
            if not metadata.valid:
                reasons.append(INVALID_OUTPUT_REASON)

        self.artifacts = artifacts
        reasons = list(dict.fromkeys(reasons))

        if reasons:
            logger.error(
                "Failed encoding...\n%s\n\n%s\nErrors: %s",
                self.command,
                self.output,
                ", ".join(reasons),
            )
            raise ValidationFailureError(
                reasons, command=self.command, output=self.output
            )

        emit(1.0)
        self.state = TranscodeState.SUCCEEDED
        logger.info(
            "Transcoding of %s to %s succeeded",
            self.request.source.path,
            self.request.output_path,
            extra={"artifact_count": len(artifacts)},
        )
        return TranscodeResult(
            artifacts=artifacts, command=self.command, output=self.output
        )


def _kill(process: subprocess.Popen) -> None:
    """Kill a child and reap it, ignoring one that already exited."""
    try:
        process.kill()
    except ProcessLookupError:
        pass
    process.wait()
