"""Tests for the JSONL logging sink."""

import json
import logging

from modmap.logging_setup import JsonlHandler
from modmap.logging_setup import init_json_logging


def read_records(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_handler_writes_structured_lines(tmp_path):
    path = tmp_path / "logs" / "modmap.jsonl"
    logger = logging.getLogger("modmap.test.handler")
    logger.setLevel(logging.INFO)
    handler = JsonlHandler(path)
    logger.addHandler(handler)
    try:
        logger.info("[autoload:resolve] %s -> namespace", "App.User", extra={"source": "namespace"})
    finally:
        logger.removeHandler(handler)
        handler.close()

    (record,) = read_records(path)
    assert record["lvl"] == "INFO"
    assert record["logger"] == "modmap.test.handler"
    assert record["stage"] == "resolve"
    assert record["message"] == "App.User -> namespace"
    assert record["source"] == "namespace"
    assert record["schema"] == {"name": "modmap.log", "ver": "1.0.0"}


def test_untagged_messages_have_no_stage(tmp_path):
    path = tmp_path / "modmap.jsonl"
    handler = JsonlHandler(path)
    handler.emit(logging.LogRecord("modmap", logging.WARNING, __file__, 1, "plain %s", ("text",), None))

    (record,) = read_records(path)
    assert record["message"] == "plain text"
    assert "stage" not in record
    assert "event" not in record


def test_extras_that_are_not_json_are_stringified(tmp_path):
    path = tmp_path / "modmap.jsonl"
    handler = JsonlHandler(path)
    record = logging.LogRecord("modmap", logging.INFO, __file__, 1, "[autoload:include] done", None, None)
    record.file = tmp_path / "src" / "User.py"
    handler.emit(record)

    (line,) = read_records(path)
    assert line["stage"] == "include"
    assert line["file"] == str(tmp_path / "src" / "User.py")


def test_init_json_logging_keeps_single_sink(tmp_path):
    first = tmp_path / "first.jsonl"
    second = tmp_path / "second.jsonl"

    init_json_logging(first, "debug")
    init_json_logging(second, "debug")

    root = logging.getLogger()
    sinks = [handler for handler in root.handlers if isinstance(handler, JsonlHandler)]
    assert [sink.path for sink in sinks] == [second]
    assert root.level == logging.DEBUG

    logging.getLogger("modmap.test.init").debug("[autoload:test] hello")
    assert read_records(second)[-1]["message"] == "[autoload:test] hello"
    assert not first.exists()
