"""Unit tests for structured logging."""

import json
import logging
from pathlib import Path
import sys

import pytest

from ja_search_repro.observability import JsonFormatter, configure_logging


def _record(message: str = "hello", *, name: str = "ja_search_repro.session", **extra) -> logging.LogRecord:
    record = logging.LogRecord(name, logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJsonFormatter:
    def test_core_fields(self):
        payload = json.loads(JsonFormatter().format(_record("Rebuilt index")))

        assert payload["message"] == "Rebuilt index"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "ja_search_repro.session"
        assert payload["component"] == "session"
        assert "timestamp" in payload

    def test_extra_fields_are_inlined(self):
        payload = json.loads(JsonFormatter().format(_record(documents=3, tokenizer="ngram")))

        assert payload["documents"] == 3
        assert payload["tokenizer"] == "ngram"

    def test_sensitive_extras_are_redacted(self):
        payload = json.loads(JsonFormatter().format(_record(token="secret-value")))

        assert payload["token"] == "[REDACTED]"

    def test_long_values_are_truncated(self):
        payload = json.loads(JsonFormatter().format(_record("x" * 3000, body="y" * 600)))

        assert len(payload["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3
        assert payload["body"].endswith("...")
        assert len(payload["body"]) == 503

    def test_non_json_extras(self):
        payload = json.loads(JsonFormatter().format(_record(terms={"東京", "京"}, path=Path("/tmp/log"))))

        assert payload["terms"] == ["京", "東京"]
        assert payload["path"] == "/tmp/log"

    def test_exception_info(self):
        try:
            raise RuntimeError("segmenter crashed")
        except RuntimeError:
            record = logging.LogRecord("ja_search_repro", logging.ERROR, __file__, 1, "failed", (), None)
            record.exc_info = sys.exc_info()

        payload = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: segmenter crashed" in payload["exception"]
        assert "component" not in payload


@pytest.mark.unit
class TestConfigureLogging:
    def test_installs_single_handler(self):
        handler = configure_logging("debug")

        root = logging.getLogger()
        assert root.handlers == [handler]
        assert root.level == logging.DEBUG
        assert isinstance(handler.formatter, JsonFormatter)

    def test_plain_text_formatter(self):
        handler = configure_logging("info", json_output=False)

        assert not isinstance(handler.formatter, JsonFormatter)

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "search.log"
        handler = configure_logging("info", log_file=log_file)

        logging.getLogger("ja_search_repro.test").info("written", extra={"documents": 1})
        handler.flush()
        handler.close()

        payload = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert payload["message"] == "written"
        assert payload["documents"] == 1

    def test_custom_handler_and_logger_levels(self):
        custom = logging.NullHandler()

        handler = configure_logging("info", handler=custom, logger_levels={"ja_search_repro.search": "error"})

        assert handler is custom
        assert logging.getLogger("ja_search_repro.search").level == logging.ERROR
        assert logging.getLogger("asyncio").level == logging.WARNING
        logging.getLogger("ja_search_repro.search").setLevel(logging.NOTSET)

    def test_unknown_level_falls_back_to_info(self):
        configure_logging("chatty")

        assert logging.getLogger().level == logging.INFO

    def test_reconfiguring_closes_the_previous_log_file(self, tmp_path):
        first = configure_logging("info", log_file=tmp_path / "first.log")
        assert first.stream is not None

        second = configure_logging("info", log_file=tmp_path / "second.log")

        assert first.stream is None
        assert logging.getLogger().handlers == [second]
        second.close()
