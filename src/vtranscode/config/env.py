"""Typed access to VTRANSCODE_* environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


class EnvReader:
    """Read and convert environment variables.

    Unset variables yield the default. Values that fail conversion are
    logged and also yield the default, so a typo in the environment never
    aborts a transcode.

    Example:
        reader = EnvReader(env={"VTRANSCODE_TIMEOUT": "5"})
        reader.get_float("VTRANSCODE_TIMEOUT", 30.0)  # 5.0
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _convert(
        self, var: str, convert: Callable[[str], T], default: T | None
    ) -> T | None:
        raw = self._env.get(var)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            logger.warning("Ignoring invalid value for %s: %r", var, raw)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        return self._env.get(var, default)

    def get_float(self, var: str, default: float | None = None) -> float | None:
        return self._convert(var, float, default)

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Read a flag; "true", "1", "yes" and "on" are true, anything else false."""
        return self._convert(var, lambda raw: raw.lower() in _TRUE_VALUES, default)

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Read a path; a missing path is ignored with a warning if ``must_exist``."""
        path = self._convert(var, lambda raw: Path(raw).expanduser(), None)
        if path is None:
            return default
        if must_exist and not path.exists():
            logger.warning("%s points to a missing path: %s", var, path)
            return default
        return path
