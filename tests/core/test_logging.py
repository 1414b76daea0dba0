"""Tests for the console formatter that renders `extra=` context."""

from __future__ import annotations

import io
import logging
import uuid

import colorlog
import pytest

from campuslive.lib.logging import ExtraFormatter


def make_record(msg: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("campuslive.test", logging.WARNING, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


@pytest.fixture()
def formatter() -> ExtraFormatter:
    return ExtraFormatter(colorlog.ColoredFormatter, "%(levelname)s %(message)s", stream=io.StringIO())


class TestExtraFormatter(object):
    def test_appends_extra_as_json(self, formatter: ExtraFormatter) -> None:
        record = make_record("closing connection", connection_id="c1", code=4403)

        assert formatter.format(record) == 'WARNING closing connection {"code": 4403, "connection_id": "c1"}'

    def test_plain_message_without_extra(self, formatter: ExtraFormatter) -> None:
        assert formatter.format(make_record("client disconnected")) == "WARNING client disconnected"

    def test_unserializable_values_are_encoded(self, formatter: ExtraFormatter) -> None:
        cid = uuid.UUID("12345678-1234-5678-1234-567812345678")
        record = make_record("joined", connection_id=cid, channel=object())

        output = formatter.format(record)

        assert '"connection_id": "12345678-1234-5678-1234-567812345678"' in output
        assert '"channel": "<object object at' in output

    def test_no_highlight_off_terminal(self, formatter: ExtraFormatter) -> None:
        output = formatter.format(make_record("queued", depth=3))

        assert "\x1b[" not in output

    def test_continuation_lines_are_indented(self, formatter: ExtraFormatter) -> None:
        output = formatter.format(make_record("first\nsecond"))

        assert output == "WARNING first\n        second"

    def test_delegates_to_base(self, formatter: ExtraFormatter) -> None:
        assert formatter.no_color is False
        assert isinstance(formatter.base, colorlog.ColoredFormatter)
