"""Logging setup: idempotency, formats, context fields."""

import json
import logging
import logging.handlers

import pytest

from brushflow.utils import logging_config
from brushflow.utils.logging_config import ContextFormatter


def make_record(msg="Stroke done", level=logging.INFO):
    return logging.LogRecord("brushflow.test", level, __file__, 1, msg, None, None)


class TestSetupLogging:
    def test_idempotent(self, restore_logging):
        first = logging_config.setup_logging("INFO", color=False)
        second = logging_config.setup_logging("DEBUG", color=False)
        root = logging.getLogger()
        assert all(h not in root.handlers for h in first)
        assert all(h in root.handlers for h in second)
        assert root.level == logging.DEBUG

    def test_unknown_level(self, restore_logging):
        with pytest.raises(ValueError, match="Unknown log level"):
            logging_config.setup_logging("LOUD")

    def test_json_file_with_context(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "replay.jsonl"
        handlers = logging_config.setup_logging(
            "DEBUG", log_file=str(log_file), json=True, to_stderr=False, context={"app": "test"}
        )
        logging_config.push_context(stroke="00001-abcdef12")
        logging.getLogger("brushflow.test").info("hello")
        for handler in handlers:
            handler.flush()

        payload = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert payload["msg"] == "hello"
        assert payload["lvl"] == "INFO"
        assert payload["app"] == "test"
        assert payload["stroke"] == "00001-abcdef12"

    def test_rotating_file(self, tmp_path, restore_logging):
        handlers = logging_config.setup_logging(
            "INFO", log_file=str(tmp_path / "r.log"), to_stderr=False, max_bytes=1024
        )
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)


class TestContext:
    def test_push_pop(self, restore_logging):
        logging_config.pop_context()
        logging_config.push_context(app="replay", stroke="s1")
        assert logging_config.get_context() == {"app": "replay", "stroke": "s1"}
        logging_config.pop_context(["stroke", "missing"])
        assert logging_config.get_context() == {"app": "replay"}
        logging_config.pop_context()
        assert logging_config.get_context() == {}

    def test_get_context_is_a_copy(self, restore_logging):
        logging_config.push_context(app="x")
        logging_config.get_context()["app"] = "y"
        assert logging_config.get_context()["app"] == "x"


class TestContextFormatter:
    def test_human_format(self, restore_logging):
        logging_config.push_context(app="replay")
        line = ContextFormatter("human", use_color=False).format(make_record())
        assert "| INFO     |" in line
        assert "app=replay |" in line
        assert line.endswith("Stroke done")

    def test_json_format(self, restore_logging):
        logging_config.pop_context()
        payload = json.loads(ContextFormatter("json").format(make_record(level=logging.WARNING)))
        assert payload["lvl"] == "WARNING"
        assert payload["name"] == "brushflow.test"
        assert "app" not in payload

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            ContextFormatter("xml")
