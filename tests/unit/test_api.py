"""Tests for the high-level transcode helpers."""

import pytest

from vtranscode.api import build_request, screenshot, screenshot_options, transcode
from vtranscode.config import TranscodeConfig, VTranscodeConfig
from vtranscode.executor.transcode import (
    AspectRatioMode,
    RawOptions,
    StructuredOptions,
)
from vtranscode.introspector import MediaIntrospectionError, MovieMetadata
from vtranscode.presets import load_presets_from_dict


@pytest.fixture
def config():
    return VTranscodeConfig(transcode=TranscodeConfig(timeout_seconds=12.0))


@pytest.fixture
def preset():
    return load_presets_from_dict(
        {
            "presets": {
                "web": {
                    "options": {"vcodec": "libx264"},
                    "autorotate": True,
                    "preserve_aspect_ratio": "height",
                    "validate": False,
                    "timeout_seconds": 60,
                }
            }
        }
    )["web"]


class TestBuildRequest:
    """Tests for build_request() precedence."""

    def test_config_defaults(self, source_file, stub_introspector, config):
        request = build_request(
            source_file, "out.mp4", config=config, introspector=stub_introspector
        )

        assert request.source.path == source_file
        assert request.timeout_seconds == 12.0
        assert request.validate is True
        assert request.autorotate is False
        assert request.preserve_aspect_ratio is AspectRatioMode.NONE
        assert stub_introspector.probed == [source_file]

    def test_preset_over_config(self, source_file, stub_introspector, config, preset):
        request = build_request(
            source_file,
            "out.mp4",
            preset=preset,
            config=config,
            introspector=stub_introspector,
        )

        assert request.options.to_args() == ["-vcodec", "libx264"]
        assert request.autorotate is True
        assert request.preserve_aspect_ratio is AspectRatioMode.HEIGHT
        assert request.validate is False
        assert request.timeout_seconds == 60

    def test_explicit_over_preset(
        self, source_file, stub_introspector, config, preset
    ):
        request = build_request(
            source_file,
            "out.mp4",
            "-an",
            preset=preset,
            autorotate=False,
            preserve_aspect_ratio="width",
            validate=True,
            timeout_seconds=0,
            config=config,
            introspector=stub_introspector,
        )

        assert isinstance(request.options, RawOptions)
        assert request.autorotate is False
        assert request.preserve_aspect_ratio is AspectRatioMode.WIDTH
        assert request.validate is True
        assert request.timeout_seconds is None

    def test_missing_source(self, temp_dir, stub_introspector, config):
        with pytest.raises(MediaIntrospectionError):
            build_request(
                temp_dir / "missing.mov",
                "out.mp4",
                config=config,
                introspector=stub_introspector,
            )

    def test_invalid_source_still_builds(
        self, source_file, stub_introspector, config, caplog
    ):
        stub_introspector.register(
            MovieMetadata(path=source_file, duration=0.0, valid=False)
        )
        request = build_request(
            source_file, "out.mp4", config=config, introspector=stub_introspector
        )

        assert request.source.valid is False
        assert "did not probe as valid media" in caplog.text


class TestScreenshotOptions:
    """Tests for screenshot_options()."""

    def test_defaults(self):
        options = screenshot_options()
        assert options.to_args() == ["-vframes", "1", "-f", "image2"]

    def test_seek_comes_first(self):
        options = screenshot_options(2.5, {"resolution": "320x180"})

        assert isinstance(options, StructuredOptions)
        assert options.to_args() == [
            "-ss",
            "2.5",
            "-vframes",
            "1",
            "-f",
            "image2",
            "-s",
            "320x180",
        ]

    def test_raw_options_prefixed(self):
        options = screenshot_options(1, "-s 160x90")

        assert isinstance(options, RawOptions)
        assert options.to_args() == [
            "-ss",
            "1",
            "-vframes",
            "1",
            "-f",
            "image2",
            "-s",
            "160x90",
        ]

    def test_caller_may_override_format(self):
        options = screenshot_options(options={"f": "mjpeg"})
        assert options.to_args() == ["-vframes", "1", "-f", "mjpeg"]


class TestTranscode:
    """End-to-end tests for transcode() and screenshot() with a fake ffmpeg."""

    def test_transcode(
        self, make_fake_ffmpeg, source_file, stub_introspector, config, temp_dir
    ):
        ffmpeg = make_fake_ffmpeg(
            """\
            status("00:00:10.00")
            with open(out, "wb") as f:
                f.write(b"encoded")
            """
        )
        progress = []

        result = transcode(
            source_file,
            temp_dir / "out.mp4",
            {"vcodec": "libx264"},
            progress_callback=progress.append,
            config=config,
            introspector=stub_introspector,
            ffmpeg_path=ffmpeg,
        )

        assert result.paths == [temp_dir / "out.mp4"]
        assert progress[0] == 0.0
        assert progress[-1] == 1.0
        assert "-vcodec libx264" in result.command

    def test_screenshot(
        self, make_fake_ffmpeg, source_file, stub_introspector, config, temp_dir
    ):
        ffmpeg = make_fake_ffmpeg(
            """\
            import json
            with open(out, "w") as f:
                json.dump(sys.argv[1:], f)
            """
        )

        result = screenshot(
            source_file,
            temp_dir / "thumb.jpg",
            seek_time=3,
            config=config,
            introspector=stub_introspector,
            ffmpeg_path=ffmpeg,
        )

        assert result.paths == [temp_dir / "thumb.jpg"]
        assert "-ss 3 -vframes 1 -f image2" in result.command
