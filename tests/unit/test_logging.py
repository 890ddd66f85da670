"""
Unit tests for the JSON log formatter.
"""

import logging
import sys

import orjson

from utils.logging import JsonFormatter


def make_record(**extra):
    record = logging.LogRecord(
        name="apps.consumer.handler",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Transaction processed: %s",
        args=("tx-1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_renders_message_and_level():
    document = orjson.loads(JsonFormatter().format(make_record()))

    assert document["message"] == "Transaction processed: tx-1"
    assert document["level"] == "INFO"
    assert document["logger"] == "apps.consumer.handler"
    assert "ts" in document


def test_includes_extra_fields():
    document = orjson.loads(JsonFormatter().format(make_record(transaction_id="tx-1", attempt=2)))

    assert document["transaction_id"] == "tx-1"
    assert document["attempt"] == 2
    assert "pathname" not in document


def test_includes_exception():
    try:
        raise RuntimeError("upload failed")
    except RuntimeError:
        record = make_record()
        record.exc_info = sys.exc_info()

    document = orjson.loads(JsonFormatter().format(record))

    assert "RuntimeError: upload failed" in document["exc_info"]
