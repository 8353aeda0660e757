"""Resolve the effective vtranscode configuration.

Each setting comes from the first source that provides it:

1. keyword arguments (the CLI flags)
2. ``VTRANSCODE_*`` environment variables
3. the TOML config file, ``$VTRANSCODE_DATA_DIR/config.toml`` by default or
   ``$VTRANSCODE_CONFIG_PATH``
4. built-in defaults

Recognized variables: ``VTRANSCODE_FFMPEG_PATH``, ``VTRANSCODE_FFPROBE_PATH``,
``VTRANSCODE_TIMEOUT`` (seconds, 0 disables the watchdog),
``VTRANSCODE_VALIDATE``, ``VTRANSCODE_PRESETS_FILE``,
``VTRANSCODE_LOG_LEVEL``, ``VTRANSCODE_LOG_FILE`` and
``VTRANSCODE_LOG_FORMAT``.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from vtranscode.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vtranscode.config.env import EnvReader
from vtranscode.config.models import VTranscodeConfig
from vtranscode.config.toml_parser import load_toml_file

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".vtranscode"
CONFIG_FILE_NAME = "config.toml"

# Parsed config files keyed by path, invalidated when the mtime changes
_file_cache: dict[Path, tuple[float, dict]] = {}
_file_cache_lock = threading.Lock()


def _path_from_env(var: str) -> Path | None:
    value = os.environ.get(var)
    return Path(value).expanduser() if value else None


def get_data_dir() -> Path:
    """Directory holding the default config file (``~/.vtranscode``)."""
    return _path_from_env("VTRANSCODE_DATA_DIR") or DEFAULT_DATA_DIR


def get_default_config_path() -> Path:
    """Config file used when no explicit path is given."""
    return _path_from_env("VTRANSCODE_CONFIG_PATH") or (
        get_data_dir() / CONFIG_FILE_NAME
    )


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Parse the TOML config file, reusing the last parse while it is unchanged.

    A missing file yields an empty dict.

    Raises:
        TomlParseError: When ``strict`` and the file cannot be parsed.
    """
    path = path or get_default_config_path()
    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        mtime = 0.0

    with _file_cache_lock:
        cached = _file_cache.get(path)
        if cached is not None and cached[0] == mtime:
            return cached[1]
        parsed = load_toml_file(path, strict=strict)
        _file_cache[path] = (mtime, parsed)
        return parsed


def clear_config_cache() -> None:
    """Forget every parsed config file."""
    with _file_cache_lock:
        _file_cache.clear()


def get_config(
    config_path: Path | None = None,
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    timeout_seconds: float | None = None,
    validate: bool | None = None,
    presets_file: Path | None = None,
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> VTranscodeConfig:
    """Build the effective configuration.

    Args:
        config_path: Config file to read instead of the default one.
        ffmpeg_path: ffmpeg executable override.
        ffprobe_path: ffprobe executable override.
        timeout_seconds: Idle timeout override; 0 disables the watchdog.
        validate: Output validation override.
        presets_file: Presets file override.
        env_reader: Environment source, ``os.environ`` when omitted.
        strict: Raise instead of ignoring an unparsable config file.

    Raises:
        TomlParseError: When ``strict`` and the config file is malformed.
        ValueError: If a resolved value is out of range.
    """
    file_config = load_config_file(config_path, strict=strict)

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config), "file")
    builder.apply(source_from_env(env_reader or EnvReader()), "env")
    builder.apply(
        ConfigSource(
            ffmpeg_path=ffmpeg_path,
            ffprobe_path=ffprobe_path,
            timeout_seconds=timeout_seconds,
            validate=validate,
            presets_file=presets_file,
        ),
        "cli",
    )

    config = builder.build()
    logger.debug(
        "Resolved configuration",
        extra={
            "timeout_seconds": config.transcode.timeout_seconds,
            "timeout_source": builder.origin("timeout_seconds"),
            "validate": config.transcode.validate,
        },
    )
    return config
