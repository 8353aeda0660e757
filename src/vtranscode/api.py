"""High-level helpers: probe a source and transcode it in one call."""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Any

from vtranscode.config import VTranscodeConfig, get_config
from vtranscode.executor.transcode import (
    AspectRatioMode,
    EncodingOptions,
    EncodingRequest,
    ProgressCallback,
    RawOptions,
    StructuredOptions,
    TranscodeExecutor,
    TranscodeResult,
    normalize_options,
)
from vtranscode.introspector import FFprobeIntrospector, MediaIntrospector
from vtranscode.presets import Preset

logger = logging.getLogger(__name__)

# Extra options that make ffmpeg write a single still image
SCREENSHOT_OPTIONS = {"vframes": 1, "f": "image2"}


def _resolve_introspector(
    introspector: MediaIntrospector | None, config: VTranscodeConfig
) -> MediaIntrospector:
    if introspector is not None:
        return introspector
    return FFprobeIntrospector(ffprobe_path=config.tools.ffprobe)


def build_request(
    source: Path | str,
    output: Path | str,
    options: Any = None,
    *,
    preset: Preset | None = None,
    autorotate: bool | None = None,
    preserve_aspect_ratio: AspectRatioMode | str | None = None,
    validate: bool | None = None,
    timeout_seconds: float | None = None,
    config: VTranscodeConfig | None = None,
    introspector: MediaIntrospector | None = None,
) -> EncodingRequest:
    """Probe ``source`` and build an EncodingRequest.

    Explicit arguments win over the preset, which wins over configuration
    defaults. A ``timeout_seconds`` of 0 disables the idle watchdog.

    Raises:
        MediaIntrospectionError: If the source does not exist.
        InvalidRequestError: If the options or flags are malformed.
    """
    config = config or get_config()
    introspector = _resolve_introspector(introspector, config)

    metadata = introspector.probe(Path(source))
    if not metadata.valid:
        logger.warning("Source %s did not probe as valid media", source)

    if options is None and preset is not None:
        options = preset.options
    if autorotate is None:
        autorotate = preset.autorotate if preset is not None else False
    if preserve_aspect_ratio is None:
        preserve_aspect_ratio = AspectRatioMode.NONE
        if preset is not None:
            preserve_aspect_ratio = preset.preserve_aspect_ratio
    if validate is None:
        validate = preset.validate if preset is not None else config.transcode.validate
    if timeout_seconds is None and preset is not None:
        timeout_seconds = preset.timeout_seconds
    if timeout_seconds is None:
        timeout_seconds = config.transcode.timeout_seconds

    return EncodingRequest(
        source=metadata,
        output_path=str(output),
        options=options,
        validate=validate,
        autorotate=autorotate,
        preserve_aspect_ratio=preserve_aspect_ratio,
        timeout_seconds=timeout_seconds,
    )


def transcode(
    source: Path | str,
    output: Path | str,
    options: Any = None,
    *,
    progress_callback: ProgressCallback | None = None,
    config: VTranscodeConfig | None = None,
    introspector: MediaIntrospector | None = None,
    ffmpeg_path: Path | str | None = None,
    **flags: Any,
) -> TranscodeResult | None:
    """Transcode ``source`` into ``output``.

    Args:
        source: Input media file.
        output: Output path, optionally with a ``%d`` sequence placeholder.
        options: Raw option string, option mapping or EncodingOptions.
        progress_callback: Receives progress fractions.
        config: Configuration; loaded with get_config() when omitted.
        introspector: Probes the source and outputs; ffprobe by default.
        ffmpeg_path: Explicit ffmpeg executable.
        **flags: preset, autorotate, preserve_aspect_ratio, validate and
            timeout_seconds, as accepted by build_request().

    Returns:
        TranscodeResult, or None if validation was disabled.

    Example:
        result = transcode("in.mov", "out.mp4", {"vcodec": "libx264"})
        print(result.artifacts[0].metadata.duration)
    """
    config = config or get_config()
    introspector = _resolve_introspector(introspector, config)
    request = build_request(
        source,
        output,
        options,
        config=config,
        introspector=introspector,
        **flags,
    )
    executor = TranscodeExecutor(
        request,
        ffmpeg_path=ffmpeg_path or config.tools.ffmpeg,
        introspector=introspector,
        poll_interval=config.transcode.poll_interval,
    )
    return executor.run(progress_callback)


def screenshot_options(
    seek_time: float | None = None, options: Any = None
) -> EncodingOptions:
    """Merge single-frame image output options into ``options``."""
    base: dict[str, Any] = {}
    if seek_time is not None:
        base["ss"] = seek_time
    base.update(SCREENSHOT_OPTIONS)

    normalized = normalize_options(options)
    if isinstance(normalized, RawOptions):
        prefix = StructuredOptions(base).to_args()
        return RawOptions(shlex.join([*prefix, *normalized.to_args()]))
    return StructuredOptions({**base, **normalized.values})


def screenshot(
    source: Path | str,
    output: Path | str,
    seek_time: float | None = None,
    options: Any = None,
    **kwargs: Any,
) -> TranscodeResult | None:
    """Grab a single frame of ``source`` as an image.

    Args:
        source: Input media file.
        output: Image path, e.g. ``thumb.jpg``.
        seek_time: Position in seconds to grab the frame from.
        options: Additional encoding options (e.g. a resolution).
        **kwargs: Passed to transcode().
    """
    return transcode(
        source, output, screenshot_options(seek_time, options), **kwargs
    )
