"""
Tests for structured logging
"""

import json
import logging

from cisco_exporter.logging import StructuredFormatter, configure_logging


def make_record(msg="Device scraped", **extra):
    record = logging.LogRecord(
        name="cisco_exporter.exporter",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json():
    entry = json.loads(StructuredFormatter("scrape").format(make_record()))

    assert entry["level"] == "INFO"
    assert entry["component"] == "scrape"
    assert entry["logger"] == "cisco_exporter.exporter"
    assert entry["message"] == "Device scraped"


def test_formatter_includes_extra_fields():
    record = make_record(extra_fields={"target": "10.0.0.1"})
    entry = json.loads(StructuredFormatter().format(record))
    assert entry["target"] == "10.0.0.1"


def test_configure_logging_from_yaml(tmp_path):
    path = tmp_path / "logging.yaml"
    path.write_text(
        "version: 1\n"
        "disable_existing_loggers: false\n"
        "loggers:\n"
        "  cisco_exporter.yaml_test:\n"
        "    level: DEBUG\n"
    )

    assert configure_logging(str(path)) is True
    assert logging.getLogger("cisco_exporter.yaml_test").level == logging.DEBUG


def test_configure_logging_without_file():
    assert configure_logging(None) is False
