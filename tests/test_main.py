"""Tests for structured logging setup."""

from __future__ import annotations

import io
import json
import logging
import sys
from collections.abc import Iterator
from datetime import datetime

import pytest

from blueprint_provider.main import JsonFormatter, setup_logging


def make_record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="blueprint_provider.reconciler",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Applied %s",
        args=("blueprint/baseline",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_base_fields(self) -> None:
        """Test every line carries timestamp, level, message and logger."""
        data = json.loads(JsonFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Applied blueprint/baseline"
        assert data["logger"] == "blueprint_provider.reconciler"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_included(self) -> None:
        """Test extra fields are emitted at the top level."""
        data = json.loads(JsonFormatter().format(make_record(address="blueprint/x", failed=0)))

        assert data["address"] == "blueprint/x"
        assert data["failed"] == 0
        assert "msg" not in data
        assert "args" not in data

    def test_non_serializable_extra(self) -> None:
        """Test values JSON cannot encode are rendered as strings."""
        data = json.loads(JsonFormatter().format(make_record(started=datetime(2024, 1, 1))))

        assert data["started"] == "2024-01-01 00:00:00"

    def test_exception_included(self) -> None:
        """Test exception tracebacks are captured."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self) -> Iterator[None]:
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_installs_single_json_handler(self) -> None:
        """Test repeated setup does not duplicate handlers."""
        setup_logging("DEBUG")
        setup_logging("debug")

        root = logging.getLogger()
        json_handlers = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(json_handlers) == 1
        assert root.level == logging.DEBUG

    def test_quiets_azure_sdk(self) -> None:
        """Test Azure SDK and urllib3 loggers are raised to WARNING."""
        setup_logging()

        assert logging.getLogger("azure").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_writes_to_given_stream(self) -> None:
        """Test log lines go to the stream passed in."""
        stream = io.StringIO()
        setup_logging(stream=stream)

        logging.getLogger("blueprint_provider.test").info("Applied", extra={"failed": 0})

        data = json.loads(stream.getvalue().splitlines()[-1])
        assert data["message"] == "Applied"
        assert data["failed"] == 0

    def test_defaults_to_stdout(self) -> None:
        """Test the handler writes to stdout when no stream is given."""
        setup_logging()

        root = logging.getLogger()
        handler = next(h for h in root.handlers if isinstance(h.formatter, JsonFormatter))
        assert handler.stream is sys.stdout
