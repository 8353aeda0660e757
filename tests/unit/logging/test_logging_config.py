"""Tests for structured logging setup."""

import json
import logging
import sys

import pytest

from vtranscode.config import LoggingConfig
from vtranscode.logging import (
    JSONFormatter,
    TranscodeContextFilter,
    clear_transcode_context,
    configure_logging,
    get_transcode_context,
    set_transcode_context,
    transcode_context,
)


def make_record(msg="hello", **extra):
    record = logging.LogRecord(
        name="vtranscode.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def reset_context():
    clear_transcode_context()
    yield
    clear_transcode_context()


class TestTranscodeContext:
    """Tests for the contextvars-based transcode context."""

    def test_context_manager_restores_previous(self):
        set_transcode_context("/a.mov", "/a.mp4")
        with transcode_context("/b.mov"):
            assert get_transcode_context() == ("/b.mov", None)
        assert get_transcode_context() == ("/a.mov", "/a.mp4")

    def test_restored_after_exception(self):
        with pytest.raises(ValueError):
            with transcode_context("/b.mov", "/b.mp4"):
                raise ValueError("boom")
        assert get_transcode_context() == (None, None)

    def test_filter_adds_tag(self):
        record = make_record()
        with transcode_context("/videos/in.mov", "/videos/out.mp4"):
            assert TranscodeContextFilter().filter(record) is True

        assert record.source_path == "/videos/in.mov"
        assert record.output_path == "/videos/out.mp4"
        assert record.source_tag == "[in.mov] "

    def test_filter_without_context(self):
        record = make_record()
        TranscodeContextFilter().filter(record)
        assert record.source_tag == ""
        assert record.source_path is None


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(make_record("ffmpeg started")))

        assert entry["level"] == "INFO"
        assert entry["message"] == "ffmpeg started"
        assert entry["logger"] == "vtranscode.test"
        assert "context" not in entry
        assert "source" not in entry

    def test_transcode_context_and_extras(self):
        record = make_record(returncode=-9)
        with transcode_context("/videos/in.mov", "/videos/out.mp4"):
            TranscodeContextFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))
        assert entry["source"] == "/videos/in.mov"
        assert entry["output"] == "/videos/out.mp4"
        assert entry["context"] == {"returncode": -9}

    def test_exception_included(self):
        try:
            raise RuntimeError("kaput")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        entry = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: kaput" in entry["exception"]


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_stderr_by_default(self, restore_root_logger):
        configure_logging(LoggingConfig(level="warning"))

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_json_file_output(self, restore_root_logger, temp_dir):
        log_file = temp_dir / "logs" / "vtranscode.log"
        configure_logging(LoggingConfig(level="debug", file=log_file, format="json"))

        with transcode_context("/videos/in.mov"):
            logging.getLogger("vtranscode.test").info("written", extra={"step": 1})
        for handler in restore_root_logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["message"] == "written"
        assert entry["source"] == "/videos/in.mov"
        assert entry["context"] == {"step": 1}

    def test_file_with_stderr(self, restore_root_logger, temp_dir):
        configure_logging(
            LoggingConfig(file=temp_dir / "v.log", include_stderr=True)
        )
        assert len(restore_root_logger.handlers) == 2

    def test_unwritable_file_falls_back(self, restore_root_logger, temp_dir, capsys):
        blocker = temp_dir / "blocker"
        blocker.write_text("")
        configure_logging(LoggingConfig(file=blocker / "v.log"))

        assert "Could not open log file" in capsys.readouterr().err
        assert len(restore_root_logger.handlers) == 1
