"""Named encoding presets loaded from YAML."""

from vtranscode.presets.loader import get_preset, load_presets, load_presets_from_dict
from vtranscode.presets.models import (
    Preset,
    PresetModel,
    PresetsFileModel,
    PresetValidationError,
)

__all__ = [
    "Preset",
    "PresetModel",
    "PresetValidationError",
    "PresetsFileModel",
    "get_preset",
    "load_presets",
    "load_presets_from_dict",
]
