"""
Unit tests for ApiClient request building and failure mapping.
"""

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from secchub_load.client import NDJSON, ApiClient, ApiResponse
from secchub_load.metrics import MetricsRegistry


pytestmark = pytest.mark.unit


class FakeResponse:
    def __init__(self, status_code=200, text="", headers=None):
        self.status_code = status_code
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {"Content-Type": "application/json"})


class FakeSession:
    """Records the arguments of each request and replies with a canned result."""

    def __init__(self, result):
        self.result = result
        self.requests = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def close(self):
        self.closed = True


def test_request_builds_url_headers_and_body():
    session = FakeSession(FakeResponse(201, '{"id": 1}'))
    client = ApiClient("http://backend/", timeout=5, session=session)

    response = client.request("POST", "/courses", token="tok", json={"name": "x"},
                              params={"a": 1})

    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", "http://backend/courses")
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["json"] == {"name": "x"}
    assert kwargs["params"] == {"a": 1}
    assert kwargs["timeout"] == 5
    assert response.status == 201
    assert response.json_field("id") == 1


def test_request_without_token_sends_no_authorization():
    session = FakeSession(FakeResponse())
    client = ApiClient("http://backend", session=session)

    client.request("GET", "/audit-logs", accept=NDJSON)

    headers = session.requests[0][2]["headers"]
    assert "Authorization" not in headers
    assert headers["Accept"] == NDJSON


@pytest.mark.parametrize("error", [
    requests.Timeout("read timed out"),
    requests.ConnectionError("refused"),
])
def test_transport_failure_becomes_status_zero(error):
    metrics = MetricsRegistry()
    client = ApiClient("http://backend", metrics=metrics, session=FakeSession(error))

    response = client.request("GET", "/courses")

    assert response.status == 0
    assert response.ok is False
    assert type(error).__name__ in response.error
    assert metrics.rate("http_req_failed").rate == 1.0
    assert metrics.trend("http_req_duration").count == 1


def test_builtin_metrics_recorded_for_success():
    metrics = MetricsRegistry()
    client = ApiClient("http://backend", metrics=metrics, session=FakeSession(FakeResponse(204)))

    client.request("DELETE", "/courses/1")

    assert metrics.rate("http_req_failed").rate == 0.0
    assert metrics.counter("http_reqs").count == 1


def test_close_closes_session():
    session = FakeSession(FakeResponse())
    ApiClient("http://backend", session=session).close()
    assert session.closed


def test_response_json_helpers():
    response = ApiResponse(status=200, text='{"id": 5}')
    assert response.json_field("id") == 5
    assert response.json_field("missing", "d") == "d"
    assert response.has_json_field("id")

    listing = ApiResponse(status=200, text="[1, 2]")
    assert listing.json_field("id") is None
    assert not listing.has_json_field("id")

    with pytest.raises(ValueError):
        ApiResponse(status=200, text="<html>").json()


def test_ndjson_lines_counts_non_empty_lines():
    body = '{"a":1}\n\n{"a":2}\n  \n{"a":3}'
    assert ApiResponse(status=200, text=body).ndjson_lines() == 3
    assert ApiResponse(status=500, text=body).ndjson_lines() == 0
    assert ApiResponse(status=200, text="").ndjson_lines() == 0
