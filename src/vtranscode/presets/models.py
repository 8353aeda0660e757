"""Pydantic models for the YAML presets file.

A presets file maps preset names to encoding options and request flags:

    schema_version: 1
    presets:
      web-720p:
        options:
          vcodec: libx264
          resolution: 1280x720
        preserve_aspect_ratio: width
        autorotate: true
      thumbnail:
        options: "-vframes 1 -f image2"
        timeout_seconds: 10
"""

import re
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vtranscode.exceptions import InvalidRequestError
from vtranscode.executor.transcode.types import (
    AspectRatioMode,
    EncodingOptions,
    normalize_options,
)

# Preset name: starts with letter, alphanumeric + hyphen + underscore
PRESET_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]{0,63}$")


class PresetValidationError(Exception):
    """Error while loading or validating presets."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class PresetModel(BaseModel):
    """Pydantic model for a single preset."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    description: str | None = None
    options: str | dict[str, Any] | None = None
    autorotate: bool = False
    preserve_aspect_ratio: Literal["none", "width", "height"] = "none"
    validate_output: bool = Field(default=True, alias="validate")
    timeout_seconds: float | None = Field(default=None, ge=0)

    @field_validator("options")
    @classmethod
    def validate_options(
        cls, v: str | dict[str, Any] | None
    ) -> str | dict[str, Any] | None:
        """Reject options that cannot be turned into ffmpeg arguments."""
        if v is not None:
            try:
                normalize_options(v)
            except InvalidRequestError as e:
                raise ValueError(str(e)) from e
        return v


class PresetsFileModel(BaseModel):
    """Pydantic model for the presets file root."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: Literal[1] = 1
    presets: dict[str, PresetModel] = Field(default_factory=dict)

    @field_validator("presets")
    @classmethod
    def validate_names(cls, v: dict[str, PresetModel]) -> dict[str, PresetModel]:
        """Validate preset names."""
        for name in v:
            if not PRESET_NAME_PATTERN.match(name):
                raise ValueError(
                    f"Invalid preset name '{name}'. Names must start with a "
                    "letter and contain only letters, digits, '-' and '_'."
                )
        return v


@dataclass(frozen=True)
class Preset:
    """A validated preset, ready to build an EncodingRequest from."""

    name: str
    options: EncodingOptions
    autorotate: bool = False
    preserve_aspect_ratio: AspectRatioMode = AspectRatioMode.NONE
    validate: bool = True
    timeout_seconds: float | None = None
    description: str | None = None

    @classmethod
    def from_model(cls, name: str, model: PresetModel) -> "Preset":
        return cls(
            name=name,
            options=normalize_options(model.options),
            autorotate=model.autorotate,
            preserve_aspect_ratio=AspectRatioMode(model.preserve_aspect_ratio),
            validate=model.validate_output,
            timeout_seconds=model.timeout_seconds,
            description=model.description,
        )
