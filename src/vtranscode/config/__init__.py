"""Configuration management for vtranscode.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VTRANSCODE_*)
3. Config file (~/.vtranscode/config.toml)
4. Default values (lowest priority)
"""

from vtranscode.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vtranscode.config.env import EnvReader
from vtranscode.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from vtranscode.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from vtranscode.config.models import (
    DEFAULT_TIMEOUT_SECONDS,
    LoggingConfig,
    ToolPathsConfig,
    TranscodeConfig,
    VTranscodeConfig,
)
from vtranscode.config.toml_parser import TomlParseError, load_toml_file

__all__ = [
    # Models
    "DEFAULT_TIMEOUT_SECONDS",
    "LoggingConfig",
    "ToolPathsConfig",
    "TranscodeConfig",
    "VTranscodeConfig",
    # Loader
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
    # Builder
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    # Logging
    "build_logging_config",
    "configure_logging_from_cli",
    # TOML
    "TomlParseError",
    "load_toml_file",
]
