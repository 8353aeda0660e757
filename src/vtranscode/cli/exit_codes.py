"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (request, config, presets)
    20-29: Target/file errors
    30-39: Tool/dependency errors
    40-49: Transcode errors
    50-59: Media errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for vtranscode CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Validation errors (10-19)
    INVALID_REQUEST = 10
    CONFIG_ERROR = 11
    PRESET_ERROR = 12

    # Target/file errors (20-29)
    TARGET_NOT_FOUND = 20

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Transcode errors (40-49)
    TRANSCODE_FAILED = 40
    PROCESS_HUNG = 41
    VALIDATION_FAILED = 42

    # Media errors (50-59)
    INVALID_MEDIA = 50
