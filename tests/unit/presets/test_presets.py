"""Tests for YAML preset loading."""

from pathlib import Path

import pytest

from vtranscode.executor.transcode import AspectRatioMode, RawOptions, StructuredOptions
from vtranscode.presets import (
    PresetValidationError,
    get_preset,
    load_presets,
    load_presets_from_dict,
)

PRESETS_YAML = """\
schema_version: 1
presets:
  web-720p:
    description: H.264 for the web
    options:
      vcodec: libx264
      resolution: 1280x720
    preserve_aspect_ratio: width
    autorotate: true
  thumbnail:
    options: "-vframes 1 -f image2"
    validate: false
    timeout_seconds: 10
"""


def write_presets(temp_dir: Path, content: str) -> Path:
    path = temp_dir / "presets.yaml"
    path.write_text(content)
    return path


class TestLoadPresets:
    """Tests for load_presets()."""

    def test_valid_file(self, temp_dir):
        presets = load_presets(write_presets(temp_dir, PRESETS_YAML))

        web = presets["web-720p"]
        assert isinstance(web.options, StructuredOptions)
        assert web.options.resolution == (1280, 720)
        assert web.preserve_aspect_ratio is AspectRatioMode.WIDTH
        assert web.autorotate is True
        assert web.validate is True
        assert web.timeout_seconds is None
        assert web.description == "H.264 for the web"

    def test_raw_options_and_validate_alias(self, temp_dir):
        thumb = load_presets(write_presets(temp_dir, PRESETS_YAML))["thumbnail"]

        assert isinstance(thumb.options, RawOptions)
        assert thumb.options.to_args() == ["-vframes", "1", "-f", "image2"]
        assert thumb.validate is False
        assert thumb.timeout_seconds == 10

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_presets(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = write_presets(temp_dir, "presets: [unclosed\n")
        with pytest.raises(PresetValidationError, match="Invalid YAML syntax"):
            load_presets(path)

    def test_empty_file(self, temp_dir):
        with pytest.raises(PresetValidationError, match="empty"):
            load_presets(write_presets(temp_dir, ""))

    def test_not_a_mapping(self, temp_dir):
        with pytest.raises(PresetValidationError, match="mapping"):
            load_presets(write_presets(temp_dir, "- one\n- two\n"))


class TestPresetValidation:
    """Tests for schema validation of preset documents."""

    def test_unknown_field(self):
        with pytest.raises(PresetValidationError, match="codec"):
            load_presets_from_dict({"presets": {"web": {"codec": "h264"}}})

    def test_unsupported_schema_version(self):
        with pytest.raises(PresetValidationError, match="schema_version"):
            load_presets_from_dict({"schema_version": 2, "presets": {}})

    def test_invalid_name(self):
        with pytest.raises(PresetValidationError, match="Invalid preset name"):
            load_presets_from_dict({"presets": {"1080p": {}}})

    def test_lone_width_rejected(self):
        with pytest.raises(PresetValidationError, match="presets.web.options"):
            load_presets_from_dict({"presets": {"web": {"options": {"width": 640}}}})

    def test_bad_aspect_mode(self):
        with pytest.raises(PresetValidationError, match="preserve_aspect_ratio"):
            load_presets_from_dict(
                {"presets": {"web": {"preserve_aspect_ratio": "diagonal"}}}
            )

    def test_negative_timeout(self):
        with pytest.raises(PresetValidationError, match="timeout_seconds"):
            load_presets_from_dict({"presets": {"web": {"timeout_seconds": -1}}})

    def test_defaults(self):
        preset = load_presets_from_dict({"presets": {"plain": {}}})["plain"]
        assert preset.options.to_args() == []
        assert preset.preserve_aspect_ratio is AspectRatioMode.NONE
        assert preset.validate is True


class TestGetPreset:
    """Tests for get_preset()."""

    def test_found(self, temp_dir):
        preset = get_preset(write_presets(temp_dir, PRESETS_YAML), "thumbnail")
        assert preset.name == "thumbnail"

    def test_unknown_lists_available(self, temp_dir):
        with pytest.raises(PresetValidationError) as exc_info:
            get_preset(write_presets(temp_dir, PRESETS_YAML), "4k")

        assert "Unknown preset '4k'" in str(exc_info.value)
        assert "thumbnail, web-720p" in str(exc_info.value)
        assert exc_info.value.field == "4k"
