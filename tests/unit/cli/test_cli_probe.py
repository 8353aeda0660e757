"""Unit tests for the probe CLI command."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from vtranscode.cli import main
from vtranscode.cli.exit_codes import ExitCode
from vtranscode.cli.probe import format_human
from vtranscode.introspector import MediaIntrospectionError, MovieMetadata


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("vtranscode.cli._configure_logging"):
        yield


@pytest.fixture
def mock_introspector():
    with patch("vtranscode.cli.probe.FFprobeIntrospector") as cls:
        yield cls.return_value


@pytest.fixture
def probed(source_file):
    return MovieMetadata(
        path=source_file,
        duration=12.5,
        rotation=90,
        calculated_aspect_ratio=16 / 9,
        container="mov,mp4,m4a,3gp,3g2,mj2",
        width=1920,
        height=1080,
        video_codec="h264",
    )


class TestFormatHuman:
    """Tests for format_human()."""

    def test_known_fields_only(self, probed):
        text = format_human(probed)

        assert "Valid: yes" in text
        assert "Duration: 12.50s" in text
        assert "Resolution: 1920x1080" in text
        assert "Rotation: 90" in text
        assert "Aspect ratio: 1.7778" in text
        assert "Audio codec" not in text


class TestProbeCommand:
    """Tests for `vtranscode probe`."""

    def test_human_output(self, runner, mock_introspector, probed, source_file):
        mock_introspector.probe.return_value = probed

        result = runner.invoke(main, ["probe", str(source_file)])

        assert result.exit_code == 0, result.output
        assert "Video codec: h264" in result.output
        mock_introspector.probe.assert_called_once_with(source_file)

    def test_json_output(self, runner, mock_introspector, probed, source_file):
        mock_introspector.probe.return_value = probed

        result = runner.invoke(main, ["probe", str(source_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["duration"] == 12.5
        assert data["resolution"] == "1920x1080"
        assert data["valid"] is True

    def test_invalid_media(self, runner, mock_introspector, source_file):
        mock_introspector.probe.return_value = MovieMetadata(
            path=source_file, duration=0.0, valid=False
        )

        result = runner.invoke(main, ["probe", str(source_file)])

        assert result.exit_code == ExitCode.INVALID_MEDIA
        assert "Valid: no" in result.output

    def test_missing_file(self, runner, mock_introspector, temp_dir):
        missing = temp_dir / "missing.mov"
        mock_introspector.probe.side_effect = MediaIntrospectionError(
            f"the file '{missing}' does not exist"
        )

        result = runner.invoke(main, ["probe", str(missing)])

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "does not exist" in result.output

    def test_ffprobe_unavailable(self, runner, mock_introspector, source_file):
        mock_introspector.probe.side_effect = MediaIntrospectionError(
            "ffprobe not found"
        )

        result = runner.invoke(main, ["probe", str(source_file), "--json"])

        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE
        assert json.loads(result.output)["error"]["code"] == "TOOL_NOT_AVAILABLE"
