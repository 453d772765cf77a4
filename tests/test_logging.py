"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from gencheck.logging import JSONFormatter, TextFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="resolved %s", args=("int",), exc_info=None, **extra):
    record = logging.LogRecord("gencheck.registry", logging.INFO, __file__, 10, msg, args, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_core_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "gencheck.registry"
        assert entry["message"] == "resolved int"
        assert "timestamp" in entry

    def test_includes_gencheck_extras_only(self):
        entry = json.loads(JSONFormatter().format(_record(gencheck_type="list[int]", other="x")))
        assert entry["gencheck_type"] == "list[int]"
        assert "other" not in entry

    def test_non_serializable_extras_are_stringified(self):
        entry = json.loads(JSONFormatter().format(_record(gencheck_type=list[int])))
        assert entry["gencheck_type"] == "list[int]"

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(_record(exc_info=exc_info)))
        assert "ValueError: boom" in entry["exception"]


class TestTextFormatter:
    def test_appends_gencheck_extras(self):
        line = TextFormatter().format(_record(gencheck_type="list[int]", gencheck_shape="ArrayType", other="x"))
        assert line.endswith("gencheck.registry: resolved int [type=list[int] shape=ArrayType]")

    def test_plain_without_extras(self):
        assert TextFormatter().format(_record()).endswith("INFO gencheck.registry: resolved int")


class TestSetupLogging:
    def test_json_format(self, restore_root_logger):
        setup_logging("json", logging.DEBUG)
        (handler,) = restore_root_logger.handlers
        assert isinstance(handler.formatter, JSONFormatter)
        assert restore_root_logger.level == logging.DEBUG

    def test_text_format(self, restore_root_logger):
        setup_logging("text")
        (handler,) = restore_root_logger.handlers
        assert isinstance(handler.formatter, TextFormatter)
        assert handler.level == logging.WARNING

    def test_replaces_existing_handlers(self, restore_root_logger):
        setup_logging("text")
        setup_logging("json")
        assert len(restore_root_logger.handlers) == 1
