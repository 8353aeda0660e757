"""Configuration data models.

This module defines dataclasses for vtranscode configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

# Idle window applied when nothing overrides it
DEFAULT_TIMEOUT_SECONDS = 30.0

_LOG_LEVELS = ("debug", "info", "warning", "error")
_LOG_FORMATS = ("text", "json")


@dataclass
class ToolPathsConfig:
    """Paths to external tools.

    None means the tool is looked up on the system PATH by name.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class TranscodeConfig:
    """Defaults applied to every transcode request."""

    # Idle timeout in seconds; None or 0 disables the watchdog
    timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS

    # Re-probe outputs after ffmpeg exits
    validate: bool = True

    # Seconds between watchdog idle checks
    poll_interval: float = 0.1

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout_seconds is not None:
            if self.timeout_seconds < 0:
                raise ValueError(
                    f"timeout_seconds must be >= 0, got {self.timeout_seconds}"
                )
            if self.timeout_seconds == 0:
                self.timeout_seconds = None
        if self.poll_interval <= 0:
            raise ValueError(
                f"poll_interval must be positive, got {self.poll_interval}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotate the log file once it reaches this size
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.lower() not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {self.level!r}")
        if self.format.lower() not in _LOG_FORMATS:
            raise ValueError(f"unknown log format {self.format!r}, use text or json")


@dataclass
class VTranscodeConfig:
    """Complete vtranscode configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    transcode: TranscodeConfig = field(default_factory=TranscodeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # YAML file holding named encoding presets
    presets_file: Path | None = None
