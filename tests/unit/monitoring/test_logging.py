"""
Unit tests for the logging setup and context injection.
"""

import json
import logging

import pytest

from showlist.monitoring.logging import (
    ContextAdapter,
    JsonFormatter,
    LoggingOptions,
    TextFormatter,
    setup_run_logger,
    with_context,
)
from showlist.storage.layouts import Layout


def make_record(msg="hello", **extra):
    record = logging.LogRecord("showlist.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("showlist")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    if hasattr(logger, "_showlist_run_id"):
        del logger._showlist_run_id


class TestFormatters:
    def test_text_formatter_context(self):
        line = TextFormatter().format(make_record(run_id="r1", stage="extract"))
        assert line == "INFO showlist.test [run=r1 stage=extract] hello"

    def test_text_formatter_plain(self):
        assert TextFormatter().format(make_record()) == "INFO showlist.test hello"

    def test_json_formatter(self):
        data = json.loads(JsonFormatter().format(make_record(run_id="r1", payload={"events": 3})))
        assert data["msg"] == "hello"
        assert data["run_id"] == "r1"
        assert data["payload"] == {"events": 3}
        assert "stage" not in data


class TestSetupRunLogger:
    def test_console_only_by_default(self, tmp_path):
        logger = setup_run_logger(Layout(tmp_path), run_id="r1")
        assert len(logger.handlers) == 1
        assert not (tmp_path / "logs").exists()

    def test_file_handler(self, tmp_path):
        layout = Layout(tmp_path)
        logger = setup_run_logger(
            layout, run_id="r2", options=LoggingOptions(enable_console=False, enable_file=True)
        )
        logging.getLogger("showlist.ingestion.test").info("written to file")
        for handler in logger.handlers:
            handler.flush()
        assert "written to file" in layout.run_log_path("r2").read_text(encoding="utf-8")

    def test_idempotent_for_same_run(self, tmp_path):
        first = setup_run_logger(Layout(tmp_path), run_id="r3")
        second = setup_run_logger(Layout(tmp_path), run_id="r3")
        assert first is second
        assert len(second.handlers) == 1

    def test_level(self, tmp_path):
        logger = setup_run_logger(Layout(tmp_path), run_id="r4", options=LoggingOptions(level="debug"))
        assert logger.level == logging.DEBUG


class TestWithContext:
    def test_injects_fields(self):
        adapter = with_context(logging.getLogger("showlist"), run_id="r1", stage="index")
        assert isinstance(adapter, ContextAdapter)
        assert adapter.extra == {"run_id": "r1", "stage": "index"}

    def test_nested_adapters_merge(self):
        base = with_context(logging.getLogger("showlist"), run_id="r1")
        nested = with_context(base, stage="venues")
        assert nested.extra == {"run_id": "r1", "stage": "venues"}
        assert nested.logger is logging.getLogger("showlist")

    def test_process_merges_call_extra(self):
        adapter = with_context(logging.getLogger("showlist"), run_id="r1")
        _, kwargs = adapter.process("msg", {"extra": {"stage": "x"}})
        assert kwargs["extra"] == {"run_id": "r1", "stage": "x"}
