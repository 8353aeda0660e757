"""Shared test fixtures for vtranscode."""

import os
import shutil
import sys
import tempfile
import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

from vtranscode.config import clear_config_cache
from vtranscode.executor.interface import refresh_tool_paths
from vtranscode.introspector import MovieMetadata, StubIntrospector

# Status line in the shape ffmpeg prints while encoding
FFMPEG_STATUS_LINE = (
    "frame=  120 fps= 60 q=28.0 size=     512kB time={time} "
    "bitrate= 838.9kbits/s speed=2.0x\r"
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_config(temp_dir: Path):
    """Point vtranscode at an empty data directory for every test.

    Strips VTRANSCODE_* variables from the environment and clears cached
    config and tool paths so tests never see the developer's settings.
    """
    data_dir = temp_dir / ".vtranscode"
    data_dir.mkdir(parents=True, exist_ok=True)

    env = {k: v for k, v in os.environ.items() if not k.startswith("VTRANSCODE_")}
    env["VTRANSCODE_DATA_DIR"] = str(data_dir)

    clear_config_cache()
    refresh_tool_paths()
    with patch.dict(os.environ, env, clear=True):
        yield data_dir
    clear_config_cache()
    refresh_tool_paths()


@pytest.fixture
def make_fake_ffmpeg(temp_dir: Path):
    """Factory writing an executable Python script that stands in for ffmpeg.

    The body runs with ``sys``, ``os`` and ``time`` imported, ``out`` bound
    to the output path (the last argument) and ``status(t)`` writing one
    ffmpeg status line with ``time=t`` to stderr.
    """
    if sys.platform == "win32":
        pytest.skip("fake ffmpeg scripts need a POSIX shebang")

    def _make(body: str, name: str = "ffmpeg") -> Path:
        script = temp_dir / name
        header = f"""\
#!{sys.executable}
import os
import sys
import time

out = sys.argv[-1]


def status(t):
    sys.stderr.write({FFMPEG_STATUS_LINE!r}.format(time=t))
    sys.stderr.flush()

"""
        script.write_text(header + textwrap.dedent(body))
        script.chmod(0o755)
        return script

    return _make


@pytest.fixture
def source_file(temp_dir: Path) -> Path:
    """An existing (dummy) source media file."""
    path = temp_dir / "input.mov"
    path.write_bytes(b"\x00" * 16)
    return path


@pytest.fixture
def source_metadata(source_file: Path) -> MovieMetadata:
    """Metadata of a 10 second landscape source."""
    return MovieMetadata(
        path=source_file,
        duration=10.0,
        rotation=None,
        calculated_aspect_ratio=16 / 9,
        valid=True,
        width=1920,
        height=1080,
    )


@pytest.fixture
def stub_introspector() -> StubIntrospector:
    """Introspector reporting every existing file as valid media."""
    return StubIntrospector(default_duration=10.0)
