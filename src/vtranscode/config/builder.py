"""Layered construction of VTranscodeConfig.

Every configuration source (file, environment, CLI) is first turned into a
flat ConfigSource. ConfigBuilder stacks the sources and maps the merged
values onto the config models; unset values fall back to the model defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from vtranscode.config.env import EnvReader
from vtranscode.config.models import (
    LoggingConfig,
    ToolPathsConfig,
    TranscodeConfig,
    VTranscodeConfig,
)


@dataclass
class ConfigSource:
    """Flat settings read from one source; None means "not set here"."""

    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    timeout_seconds: float | None = None
    validate: bool | None = None
    poll_interval: float | None = None

    presets_file: Path | None = None

    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


# ConfigSource field -> model field, per config section
_TOOL_FIELDS = {"ffmpeg_path": "ffmpeg", "ffprobe_path": "ffprobe"}
_TRANSCODE_FIELDS = {
    "timeout_seconds": "timeout_seconds",
    "validate": "validate",
    "poll_interval": "poll_interval",
}
_LOGGING_FIELDS = {
    "logging_level": "level",
    "logging_file": "file",
    "logging_format": "format",
    "logging_include_stderr": "include_stderr",
    "logging_max_bytes": "max_bytes",
    "logging_backup_count": "backup_count",
}


class ConfigBuilder:
    """Merge ConfigSources, later ones winning, and build the config.

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config), "file")
        builder.apply(source_from_env(EnvReader()), "env")
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._origins: dict[str, str] = {}

    def apply(self, source: ConfigSource, source_name: str = "unknown") -> None:
        """Override merged values with every value ``source`` sets."""
        for f in fields(source):
            value = getattr(source, f.name)
            if value is None:
                continue
            self._values[f.name] = value
            self._origins[f.name] = source_name

    def origin(self, key: str) -> str:
        """Name of the source that set ``key``, or "default"."""
        return self._origins.get(key, "default")

    def _section(self, mapping: dict[str, str]) -> dict[str, Any]:
        return {
            model_field: self._values[source_field]
            for source_field, model_field in mapping.items()
            if source_field in self._values
        }

    def build(self) -> VTranscodeConfig:
        """Create the config models from the merged values.

        Raises:
            ValueError: If a merged value fails model validation.
        """
        return VTranscodeConfig(
            tools=ToolPathsConfig(**self._section(_TOOL_FIELDS)),
            transcode=TranscodeConfig(**self._section(_TRANSCODE_FIELDS)),
            logging=LoggingConfig(**self._section(_LOGGING_FIELDS)),
            presets_file=self._values.get("presets_file"),
        )


def _as_path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Read the ``[tools]``, ``[transcode]``, ``[presets]`` and ``[logging]`` tables."""
    tools = file_config.get("tools", {})
    transcode = file_config.get("transcode", {})
    presets = file_config.get("presets", {})
    log = file_config.get("logging", {})

    return ConfigSource(
        ffmpeg_path=_as_path(tools.get("ffmpeg")),
        ffprobe_path=_as_path(tools.get("ffprobe")),
        timeout_seconds=transcode.get("timeout_seconds"),
        validate=transcode.get("validate"),
        poll_interval=transcode.get("poll_interval"),
        presets_file=_as_path(presets.get("file")),
        logging_level=log.get("level"),
        logging_file=_as_path(log.get("file")),
        logging_format=log.get("format"),
        logging_include_stderr=log.get("include_stderr"),
        logging_max_bytes=log.get("max_bytes"),
        logging_backup_count=log.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Read the ``VTRANSCODE_*`` environment variables."""
    return ConfigSource(
        ffmpeg_path=reader.get_path("VTRANSCODE_FFMPEG_PATH"),
        ffprobe_path=reader.get_path("VTRANSCODE_FFPROBE_PATH"),
        timeout_seconds=reader.get_float("VTRANSCODE_TIMEOUT"),
        validate=reader.get_bool("VTRANSCODE_VALIDATE"),
        presets_file=reader.get_path("VTRANSCODE_PRESETS_FILE"),
        logging_level=reader.get_str("VTRANSCODE_LOG_LEVEL"),
        logging_file=reader.get_path("VTRANSCODE_LOG_FILE", must_exist=False),
        logging_format=reader.get_str("VTRANSCODE_LOG_FORMAT"),
    )
