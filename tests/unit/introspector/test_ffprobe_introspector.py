"""Tests for FFprobeIntrospector and StubIntrospector."""

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from vtranscode.introspector import (
    FFprobeIntrospector,
    MediaIntrospectionError,
    MovieMetadata,
    StubIntrospector,
)

PROBE_OUTPUT = {
    "streams": [
        {
            "index": 0,
            "codec_type": "video",
            "codec_name": "h264",
            "width": 720,
            "height": 1280,
            "tags": {"rotate": "90"},
        }
    ],
    "format": {"duration": "12.5"},
}


@pytest.fixture
def media_file(temp_dir: Path) -> Path:
    path = temp_dir / "clip.mp4"
    path.write_bytes(b"\x00")
    return path


class TestFFprobeIntrospector:
    """Tests for FFprobeIntrospector.probe."""

    def test_invokes_ffprobe_with_json_flags(self, media_file):
        introspector = FFprobeIntrospector(ffprobe_path="/opt/ffprobe")
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            return_value=(json.dumps(PROBE_OUTPUT), "", 0),
        ) as mock_run:
            metadata = introspector.probe(media_file)

        args = mock_run.call_args.args[0]
        assert args[0] == "/opt/ffprobe"
        assert args[1:3] == ["-i", media_file]
        assert "-show_error" in args
        assert "-show_streams" in args
        assert metadata.duration == pytest.approx(12.5)
        assert metadata.rotation == 90
        assert metadata.valid is True

    def test_missing_file_raises(self, temp_dir):
        introspector = FFprobeIntrospector(ffprobe_path="ffprobe")
        with pytest.raises(MediaIntrospectionError, match="does not exist"):
            introspector.probe(temp_dir / "missing.mp4")

    def test_missing_tool_raises(self, media_file):
        introspector = FFprobeIntrospector(ffprobe_path="/nonexistent/ffprobe")
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            side_effect=FileNotFoundError("no such file"),
        ):
            with pytest.raises(MediaIntrospectionError, match="could not be run"):
                introspector.probe(media_file)

    def test_timeout_raises(self, media_file):
        introspector = FFprobeIntrospector(ffprobe_path="ffprobe", timeout=1)
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            side_effect=subprocess.TimeoutExpired(cmd="ffprobe", timeout=1),
        ):
            with pytest.raises(MediaIntrospectionError, match="timed out"):
                introspector.probe(media_file)

    @pytest.mark.parametrize("stdout", ["", "not json", "[]"])
    def test_unparseable_output_is_invalid(self, media_file, stdout):
        introspector = FFprobeIntrospector(ffprobe_path="ffprobe")
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            return_value=(stdout, "Invalid data found", 1),
        ):
            metadata = introspector.probe(media_file)

        assert metadata.valid is False
        assert metadata.duration == 0.0

    def test_stderr_codec_error_marks_invalid(self, media_file):
        introspector = FFprobeIntrospector(ffprobe_path="ffprobe")
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            return_value=(
                json.dumps(PROBE_OUTPUT),
                "Unsupported codec with id 0 for input stream 0",
                0,
            ),
        ):
            assert introspector.probe(media_file).valid is False

    def test_reads_bytes_and_repairs_latin1_tags(self, media_file):
        output = dict(PROBE_OUTPUT, format={"duration": "12.5", "tags": {"t": "X"}})
        raw = json.dumps(output).encode("utf-8").replace(b'"X"', b'"caf\xe9"')
        introspector = FFprobeIntrospector(ffprobe_path="ffprobe")
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            return_value=(raw, b"", 0),
        ) as mock_run:
            metadata = introspector.probe(media_file)

        assert mock_run.call_args.kwargs["text"] is False
        assert metadata.valid is True
        assert metadata.duration == pytest.approx(12.5)

    def test_garbled_stderr_still_classified(self, media_file):
        introspector = FFprobeIntrospector(ffprobe_path="ffprobe")
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            return_value=(
                json.dumps(PROBE_OUTPUT).encode(),
                b"caf\xe9: Unsupported codec with id 0 for input stream 0",
                0,
            ),
        ):
            assert introspector.probe(media_file).valid is False

    def test_default_path_from_configuration(self, media_file):
        with patch(
            "vtranscode.executor.interface.get_tool_path", return_value="/cfg/ffprobe"
        ):
            introspector = FFprobeIntrospector()
        with patch(
            "vtranscode.introspector.ffprobe.run_command",
            return_value=(json.dumps(PROBE_OUTPUT), "", 0),
        ) as mock_run:
            introspector.probe(media_file)
        assert mock_run.call_args.args[0][0] == "/cfg/ffprobe"


class TestStubIntrospector:
    """Tests for StubIntrospector."""

    def test_registered_metadata_returned(self, temp_dir):
        stub = StubIntrospector()
        metadata = MovieMetadata(path=temp_dir / "x.mp4", duration=3.0, valid=False)
        stub.register(metadata)
        assert stub.probe(temp_dir / "x.mp4") is metadata

    def test_existing_file_is_valid(self, media_file):
        stub = StubIntrospector(default_duration=4.0)
        metadata = stub.probe(media_file)
        assert metadata.valid is True
        assert metadata.duration == 4.0
        assert stub.probed == [media_file]

    def test_missing_file_raises(self, temp_dir):
        with pytest.raises(MediaIntrospectionError):
            StubIntrospector().probe(temp_dir / "nope.mp4")
