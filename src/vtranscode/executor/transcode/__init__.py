"""Transcode executor module.

This package runs ffmpeg for a single encoding request:
- types: Request, option and result data structures
- decisions: Rotation and aspect-ratio option derivation
- command: FFmpeg command building and output path expansion
- executor: Main TranscodeExecutor class
"""

from .command import (
    SEQUENCE_PLACEHOLDER,
    build_transcode_command,
    expand_output_paths,
    format_command,
    has_sequence_placeholder,
)
from .decisions import derive_aspect_options, derive_rotation_options, round_even
from .executor import (
    INVALID_OUTPUT_REASON,
    NO_OUTPUT_REASON,
    ProgressCallback,
    TranscodeExecutor,
)
from .types import (
    AspectRatioMode,
    EncodingOptions,
    EncodingRequest,
    OptionDelta,
    RawOptions,
    StructuredOptions,
    TranscodeArtifact,
    TranscodeResult,
    TranscodeState,
    normalize_options,
    parse_resolution,
)

__all__ = [
    # Types
    "AspectRatioMode",
    "EncodingOptions",
    "EncodingRequest",
    "OptionDelta",
    "RawOptions",
    "StructuredOptions",
    "TranscodeArtifact",
    "TranscodeResult",
    "TranscodeState",
    "normalize_options",
    "parse_resolution",
    # Decisions
    "derive_aspect_options",
    "derive_rotation_options",
    "round_even",
    # Command
    "SEQUENCE_PLACEHOLDER",
    "build_transcode_command",
    "expand_output_paths",
    "format_command",
    "has_sequence_placeholder",
    # Executor
    "INVALID_OUTPUT_REASON",
    "NO_OUTPUT_REASON",
    "ProgressCallback",
    "TranscodeExecutor",
]
