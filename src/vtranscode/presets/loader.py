"""Presets file loading and validation."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vtranscode.presets.models import (
    Preset,
    PresetsFileModel,
    PresetValidationError,
)

logger = logging.getLogger(__name__)


def load_presets(presets_path: Path) -> dict[str, Preset]:
    """Load and validate presets from a YAML file.

    Args:
        presets_path: Path to the YAML presets file.

    Returns:
        Mapping of preset name to Preset.

    Raises:
        PresetValidationError: If the file is not valid YAML or fails
            schema validation.
        FileNotFoundError: If the file does not exist.
    """
    presets_path = Path(presets_path)
    if not presets_path.exists():
        raise FileNotFoundError(f"Presets file not found: {presets_path}")

    try:
        with open(presets_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PresetValidationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise PresetValidationError("Presets file is empty")

    if not isinstance(data, dict):
        raise PresetValidationError("Presets file must be a YAML mapping")

    presets = load_presets_from_dict(data)
    logger.debug("Loaded %d presets from %s", len(presets), presets_path)
    return presets


def load_presets_from_dict(data: dict[str, Any]) -> dict[str, Preset]:
    """Validate a parsed presets document.

    Raises:
        PresetValidationError: If the data fails schema validation.
    """
    try:
        model = PresetsFileModel.model_validate(data)
    except ValidationError as e:
        raise PresetValidationError(_format_validation_error(e)) from e

    return {
        name: Preset.from_model(name, preset)
        for name, preset in model.presets.items()
    }


def get_preset(presets_path: Path, name: str) -> Preset:
    """Load a single preset by name.

    Raises:
        PresetValidationError: If the file is invalid or has no such preset.
        FileNotFoundError: If the file does not exist.
    """
    presets = load_presets(presets_path)
    try:
        return presets[name]
    except KeyError:
        available = ", ".join(sorted(presets)) or "none"
        raise PresetValidationError(
            f"Unknown preset '{name}' (available: {available})", field=name
        ) from None


def _format_validation_error(error: ValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Preset validation failed: {loc}: {msg}"
        return f"Preset validation failed: {msg}"
    return f"Preset validation failed: {error}"
