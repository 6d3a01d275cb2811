"""
Tests for retirement_advisor/utils: currency display and log formatting.

What we test
------------
  - format_currency / format_amount rendering.
  - component_name() strips the package prefix.
  - The text formatter renders "<ts>Z LEVEL component | message" in UTC.
  - The JSON formatter emits app / component / msg plus ``extra=`` fields.
"""

from __future__ import annotations

import json
import logging

import pytest

from retirement_advisor.utils.currency import format_amount, format_currency
from retirement_advisor.utils.logging import (
    _ComponentFilter,
    _JsonFormatter,
    build_formatter,
    component_name,
)


class TestCurrency:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1234.5, "$1,234.50"),
            (0.0, "$0.00"),
            (-12.0, "-$12.00"),
            (1_000_000.0, "$1,000,000.00"),
        ],
    )
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected

    def test_format_currency_whole_units(self):
        assert format_currency(250.0, decimals=0) == "$250"

    @pytest.mark.parametrize("value, expected", [(12_345.6, "12,346"), (5_000.0, "5,000")])
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected


def _record(name="retirement_advisor.advice.engine", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name, logging.INFO, __file__, 1,
        "Advice generated | recommendations=%d", (3,), None,
    )
    record.created = 0.0
    for key, val in extra.items():
        setattr(record, key, val)
    return record


class TestComponentName:
    @pytest.mark.parametrize(
        "logger_name, expected",
        [
            ("retirement_advisor.advice.engine", "advice.engine"),
            ("retirement_advisor", "app"),
            ("retirement_advisor_extra", "retirement_advisor_extra"),
            ("urllib3.connectionpool", "urllib3.connectionpool"),
        ],
    )
    def test_names(self, logger_name, expected):
        assert component_name(logger_name) == expected


class TestTextFormatter:
    def test_line_layout(self):
        record = _record()
        _ComponentFilter().filter(record)
        line = build_formatter(json_format=False).format(record)
        assert line == "1970-01-01T00:00:00Z INFO     advice.engine | Advice generated | recommendations=3"

    def test_filter_keeps_record(self):
        assert _ComponentFilter().filter(_record()) is True


class TestJsonFormatter:
    def test_core_fields(self):
        payload = json.loads(build_formatter(json_format=True).format(_record()))
        assert payload["app"] == "retirement_advisor"
        assert payload["level"] == "INFO"
        assert payload["component"] == "advice.engine"
        assert payload["msg"] == "Advice generated | recommendations=3"
        assert payload["ts"] == "1970-01-01T00:00:00Z"

    def test_extras_included(self):
        record = _record(household="h1")
        _ComponentFilter().filter(record)
        payload = json.loads(_JsonFormatter().format(record))
        assert payload["household"] == "h1"
        assert "args" not in payload
        assert payload["component"] == "advice.engine"
