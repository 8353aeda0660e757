"""Transcode data types and result classes.

This module defines the request, option and result structures used
throughout the transcode executor.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from vtranscode.config.models import DEFAULT_TIMEOUT_SECONDS
from vtranscode.exceptions import InvalidRequestError
from vtranscode.introspector.models import MovieMetadata

# Option keys with special meaning in structured options
RESOLUTION_KEY = "resolution"
# ffmpeg's own size flag, accepted as an alias of RESOLUTION_KEY
SIZE_FLAG = "s"
FILTER_KEYS = ("vf", "filter:v")


class AspectRatioMode(Enum):
    """Which requested dimension is kept when preserving the aspect ratio."""

    NONE = "none"
    WIDTH = "width"
    HEIGHT = "height"


class TranscodeState(Enum):
    """Lifecycle of a single TranscodeExecutor run."""

    IDLE = "idle"
    DERIVING = "deriving"
    SPAWNED = "spawned"
    STREAMING = "streaming"
    TIMED_OUT = "timed_out"
    EXITED = "exited"
    VALIDATING = "validating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def parse_resolution(value: str) -> tuple[int, int]:
    """Parse a ``WxH`` resolution string.

    Raises:
        InvalidRequestError: If the value is not two positive integers.
    """
    width, sep, height = str(value).lower().partition("x")
    try:
        if not sep:
            raise ValueError(value)
        parsed = (int(width), int(height))
    except ValueError:
        raise InvalidRequestError(
            f"Invalid resolution '{value}', expected WIDTHxHEIGHT"
        ) from None
    if parsed[0] <= 0 or parsed[1] <= 0:
        raise InvalidRequestError(f"Resolution must be positive, got '{value}'")
    return parsed


@dataclass(frozen=True)
class OptionDelta:
    """Options derived from source metadata, merged into the request options.

    Attributes:
        video_filters: Filters appended to the video filter chain.
        flags: (flag, value) pairs set on the command line.
        width: Output width to request, if derived.
        height: Output height to request, if derived.
        swaps_orientation: True when the filters turn portrait into landscape
            or the other way round.
    """

    video_filters: tuple[str, ...] = ()
    flags: tuple[tuple[str, str], ...] = ()
    width: int | None = None
    height: int | None = None
    swaps_orientation: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.video_filters
            or self.flags
            or self.width is not None
            or self.height is not None
        )

    def combine(self, other: OptionDelta) -> OptionDelta:
        """Return a delta applying ``self`` then ``other``."""
        return OptionDelta(
            video_filters=self.video_filters + other.video_filters,
            flags=self.flags + other.flags,
            width=other.width if other.width is not None else self.width,
            height=other.height if other.height is not None else self.height,
            swaps_orientation=self.swaps_orientation or other.swaps_orientation,
        )


class EncodingOptions:
    """Base class for the two accepted option shapes.

    Subclasses render themselves into ffmpeg argument tokens, placed between
    the input and the output path on the command line.
    """

    def to_args(self) -> list[str]:
        raise NotImplementedError

    @property
    def resolution(self) -> tuple[int, int] | None:
        """Requested (width, height), or None when no size was requested."""
        raise NotImplementedError

    @property
    def width(self) -> int | None:
        resolution = self.resolution
        return resolution[0] if resolution else None

    @property
    def height(self) -> int | None:
        resolution = self.resolution
        return resolution[1] if resolution else None

    def with_updates(self, delta: OptionDelta) -> EncodingOptions:
        raise NotImplementedError

    def __str__(self) -> str:
        return shlex.join(self.to_args())


@dataclass(frozen=True)
class RawOptions(EncodingOptions):
    """Options given as a single ffmpeg argument string.

    The text is split with shell quoting rules, e.g.
    ``-vcodec libx264 -s 640x480 -vf "scale=iw/2:-2"``.
    """

    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise InvalidRequestError(
                f"RawOptions text must be a str, got {type(self.text).__name__}"
            )
        try:
            tokens = shlex.split(self.text)
        except ValueError as e:
            raise InvalidRequestError(f"Cannot parse options '{self.text}': {e}") from e
        object.__setattr__(self, "_tokens", tuple(tokens))

    def to_args(self) -> list[str]:
        return list(self._tokens)

    def _value_of(self, flag: str) -> str | None:
        tokens = self._tokens
        for i, token in enumerate(tokens[:-1]):
            if token == flag:
                return tokens[i + 1]
        return None

    @property
    def resolution(self) -> tuple[int, int] | None:
        value = self._value_of("-s")
        return parse_resolution(value) if value is not None else None

    def with_updates(self, delta: OptionDelta) -> RawOptions:
        tokens = list(self._tokens)

        if delta.video_filters:
            chain = ",".join(delta.video_filters)
            for flag in ("-vf", "-filter:v"):
                if flag in tokens[:-1]:
                    i = tokens.index(flag) + 1
                    tokens[i] = f"{tokens[i]},{chain}"
                    break
            else:
                tokens += ["-vf", chain]

        for flag, value in delta.flags:
            _merge_flag(tokens, f"-{flag}", value)

        if delta.width is not None or delta.height is not None:
            current = self.resolution or (None, None)
            width = delta.width if delta.width is not None else current[0]
            height = delta.height if delta.height is not None else current[1]
            if width is None or height is None:
                raise InvalidRequestError(
                    "Cannot set a single output dimension without a resolution"
                )
            _set_token(tokens, "-s", f"{width}x{height}")

        return RawOptions(shlex.join(tokens))


def _set_token(tokens: list[str], flag: str, value: str) -> None:
    if flag in tokens[:-1]:
        tokens[tokens.index(flag) + 1] = value
    else:
        tokens += [flag, value]


def _setting_key(value: str) -> str | None:
    key, sep, _ = value.partition("=")
    return key if sep else None


def _merge_setting(existing: list[str], value: str) -> list[str]:
    """Replace the entry setting the same ``key=`` as ``value``, or append it."""
    key = _setting_key(value)
    merged = [item for item in existing if _setting_key(item) != key]
    return [*merged, value]


def _merge_flag(tokens: list[str], flag: str, value: str) -> None:
    """Set ``flag`` to ``value`` on a token list.

    Flags taking ``key=value`` settings, such as ``-metadata``, may repeat,
    so only an occurrence setting the same key is replaced.
    """
    if _setting_key(value) is None:
        _set_token(tokens, flag, value)
        return
    for i in range(len(tokens) - 1):
        if tokens[i] == flag and _setting_key(tokens[i + 1]) == _setting_key(value):
            tokens[i + 1] = value
            return
    tokens += [flag, value]


@dataclass(frozen=True)
class StructuredOptions(EncodingOptions):
    """Options given as a mapping of ffmpeg flag names to values.

    Keys are ffmpeg flags without the leading dash. Values render as:
    True emits the bare flag, False/None omit it, lists repeat the flag,
    anything else is stringified. ``resolution`` (``"WxH"``) or a
    ``width``/``height`` pair render as ``-s WxH``; ``vf`` lists are joined
    into one filter chain.

    Example:
        StructuredOptions({"vcodec": "libx264", "resolution": "640x360"})
    """

    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        values = {str(key).lstrip("-"): value for key, value in self.values.items()}
        if values.get(SIZE_FLAG) is not None:
            size_keys = (RESOLUTION_KEY, "width", "height")
            if any(values.get(key) is not None for key in size_keys):
                raise InvalidRequestError(
                    "Give the output size once, as 's', 'resolution' or width/height"
                )
            values[RESOLUTION_KEY] = values.pop(SIZE_FLAG)
        else:
            values.pop(SIZE_FLAG, None)
        has_width = values.get("width") is not None
        has_height = values.get("height") is not None
        if has_width != has_height:
            raise InvalidRequestError(
                "Structured options need both 'width' and 'height' (or 'resolution')"
            )
        object.__setattr__(self, "values", MappingProxyType(values))
        # Validate eagerly so bad sizes fail before spawning
        _ = self.resolution

    @property
    def resolution(self) -> tuple[int, int] | None:
        value = self.values.get(RESOLUTION_KEY)
        if value is not None:
            return parse_resolution(value)
        width, height = self.values.get("width"), self.values.get("height")
        if width is None:
            return None
        try:
            parsed = (int(width), int(height))
        except (TypeError, ValueError):
            raise InvalidRequestError(
                f"Invalid width/height: {width!r}x{height!r}"
            ) from None
        if parsed[0] <= 0 or parsed[1] <= 0:
            raise InvalidRequestError(f"Dimensions must be positive, got {parsed}")
        return parsed

    def to_args(self) -> list[str]:
        args: list[str] = []
        resolution = self.resolution
        for key, value in self.values.items():
            if key in (RESOLUTION_KEY, "width", "height"):
                continue
            if value is None or value is False:
                continue
            if key in FILTER_KEYS and isinstance(value, (list, tuple)):
                args += [f"-{key}", ",".join(str(v) for v in value)]
            elif value is True:
                args.append(f"-{key}")
            elif isinstance(value, (list, tuple)):
                for item in value:
                    args += [f"-{key}", str(item)]
            else:
                args += [f"-{key}", str(value)]
        if resolution is not None:
            args += ["-s", f"{resolution[0]}x{resolution[1]}"]
        return args

    def with_updates(self, delta: OptionDelta) -> StructuredOptions:
        values = dict(self.values)

        if delta.video_filters:
            key = next((k for k in FILTER_KEYS if values.get(k)), "vf")
            existing = values.get(key) or []
            if isinstance(existing, str):
                existing = [existing]
            values[key] = [*existing, *delta.video_filters]

        for flag, value in delta.flags:
            existing = values.get(flag)
            if _setting_key(value) is None or existing in (None, False, True):
                values[flag] = value
                continue
            if isinstance(existing, (list, tuple)):
                values[flag] = _merge_setting([str(v) for v in existing], value)
            else:
                values[flag] = _merge_setting([str(existing)], value)

        if delta.width is not None or delta.height is not None:
            current = self.resolution or (None, None)
            width = delta.width if delta.width is not None else current[0]
            height = delta.height if delta.height is not None else current[1]
            if width is None or height is None:
                raise InvalidRequestError(
                    "Cannot set a single output dimension without a resolution"
                )
            values.pop("width", None)
            values.pop("height", None)
            values[RESOLUTION_KEY] = f"{width}x{height}"

        return StructuredOptions(values)


def normalize_options(value: Any) -> EncodingOptions:
    """Normalize caller-supplied options into an EncodingOptions instance.

    Args:
        value: A str, a Mapping, an EncodingOptions, or None.

    Returns:
        RawOptions for strings, StructuredOptions for mappings and None.

    Raises:
        InvalidRequestError: For any other type.
    """
    if value is None:
        return StructuredOptions({})
    if isinstance(value, EncodingOptions):
        return value
    if isinstance(value, str):
        return RawOptions(value)
    if isinstance(value, Mapping):
        return StructuredOptions(value)
    raise InvalidRequestError(
        f"Unknown options format '{type(value).__name__}', "
        "should be either EncodingOptions, Mapping or str."
    )


@dataclass(frozen=True)
class EncodingRequest:
    """One transcode of ``source`` into ``output_path``.

    ``options`` accepts anything normalize_options() does and is stored
    normalized. ``output_path`` may contain a ``%d``/``%03d`` sequence
    placeholder, in which case validation checks every matching file.
    A ``timeout_seconds`` of None or 0 disables the idle watchdog.
    """

    source: MovieMetadata
    output_path: str
    options: EncodingOptions = field(default_factory=StructuredOptions)
    validate: bool = True
    autorotate: bool = False
    preserve_aspect_ratio: AspectRatioMode = AspectRatioMode.NONE
    timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not isinstance(self.source, MovieMetadata):
            raise InvalidRequestError(
                f"source must be MovieMetadata, got {type(self.source).__name__}"
            )
        try:
            output_path = os.fspath(self.output_path)
        except TypeError:
            raise InvalidRequestError(
                f"output_path must be a path, got {type(self.output_path).__name__}"
            ) from None
        if not output_path:
            raise InvalidRequestError("output_path must not be empty")
        object.__setattr__(self, "output_path", str(output_path))

        object.__setattr__(self, "options", normalize_options(self.options))

        mode = self.preserve_aspect_ratio
        if mode is None:
            mode = AspectRatioMode.NONE
        if not isinstance(mode, AspectRatioMode):
            try:
                mode = AspectRatioMode(str(mode).lower())
            except ValueError:
                raise InvalidRequestError(
                    f"preserve_aspect_ratio must be one of "
                    f"{[m.value for m in AspectRatioMode]}, got {mode!r}"
                ) from None
        object.__setattr__(self, "preserve_aspect_ratio", mode)

        for name in ("validate", "autorotate"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidRequestError(
                    f"{name} must be a bool, got {getattr(self, name)!r}"
                )

        if self.timeout_seconds is not None:
            if isinstance(self.timeout_seconds, bool) or not isinstance(
                self.timeout_seconds, (int, float)
            ):
                raise InvalidRequestError(
                    f"timeout_seconds must be a number, got {self.timeout_seconds!r}"
                )
            if self.timeout_seconds < 0:
                raise InvalidRequestError(
                    f"timeout_seconds must be >= 0, got {self.timeout_seconds}"
                )
            if self.timeout_seconds == 0:
                object.__setattr__(self, "timeout_seconds", None)


@dataclass(frozen=True)
class TranscodeArtifact:
    """One validated output file."""

    path: Path
    valid: bool
    metadata: MovieMetadata


@dataclass(frozen=True)
class TranscodeResult:
    """Result of a validated transcode."""

    artifacts: list[TranscodeArtifact]
    command: str
    output: str = ""

    @property
    def paths(self) -> list[Path]:
        return [artifact.path for artifact in self.artifacts]
