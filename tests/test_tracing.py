"""
Unit tests for the tracing helpers with tracing disabled.
"""

import pytest
from opentelemetry.trace import StatusCode

from secchub_load.config import Config
from secchub_load.tracing import _parse_headers, init_tracing, operation_span, record_checks


pytestmark = pytest.mark.unit


class FakeSpan:
    def __init__(self):
        self.attributes = {}
        self.status = None

    def set_attribute(self, key, value):
        self.attributes[key] = value

    def set_status(self, code, description=None):
        self.status = (code, description)


def test_disabled_tracing_yields_no_span():
    init_tracing(Config())
    with operation_span("admin", "course") as span:
        assert span is None
    record_checks(span, 3, 1)


def test_record_checks_marks_failed_operations():
    span = FakeSpan()
    record_checks(span, 6, 2)
    assert span.attributes == {"loadtest.calls": 6, "loadtest.failed_checks": 2}
    assert span.status == (StatusCode.ERROR, "2 checks failed")

    clean = FakeSpan()
    record_checks(clean, 6, 0)
    assert clean.status[0] == StatusCode.OK


def test_parse_headers():
    assert _parse_headers("api-key=abc, x-team = load ,junk") == {
        "api-key": "abc",
        "x-team": "load",
    }
