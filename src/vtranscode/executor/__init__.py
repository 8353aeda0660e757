"""Execution layer: tool resolution and the ffmpeg transcode executor."""

from vtranscode.executor.interface import (
    find_tool,
    get_tool_path,
    refresh_tool_paths,
)
from vtranscode.executor.transcode import (
    AspectRatioMode,
    EncodingRequest,
    RawOptions,
    StructuredOptions,
    TranscodeArtifact,
    TranscodeExecutor,
    TranscodeResult,
    TranscodeState,
)

__all__ = [
    "AspectRatioMode",
    "EncodingRequest",
    "RawOptions",
    "StructuredOptions",
    "TranscodeArtifact",
    "TranscodeExecutor",
    "TranscodeResult",
    "TranscodeState",
    "find_tool",
    "get_tool_path",
    "refresh_tool_paths",
]
