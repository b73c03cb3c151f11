"""
Shared pytest fixtures for the secchub-load test suite.

Scenario code talks to the backend only through ApiClient.request(), so
the fixtures replace it with FakeApiClient: a router from (method, path
regex) to canned ApiResponses that remembers every call it served.
"""

import json
import random
import re
from dataclasses import dataclass
from typing import Any

import pytest
from requests.structures import CaseInsensitiveDict

from secchub_load.client import JSON, ApiResponse
from secchub_load.context import SharedTestContext
from secchub_load.metrics import MetricsRegistry
from secchub_load.steps import StepRunner


@dataclass
class RecordedCall:
    method: str
    path: str
    token: str | None
    json: Any
    params: dict | None
    accept: str
    name: str | None


class FakeApiClient:
    """Stands in for ApiClient; unmatched requests get 200 with an empty JSON list."""

    def __init__(self, metrics: MetricsRegistry | None = None):
        self.metrics = metrics
        self.calls: list[RecordedCall] = []
        self.closed = False
        self._routes: list[tuple[str, re.Pattern, ApiResponse]] = []

    def route(self, method: str, path: str, status: int = 200, body: Any = None,
              headers: dict[str, str] | None = None) -> None:
        """Answer ``method path`` (a regex, matched in full) with a canned response.

        Routes added later win over earlier ones.
        """
        if body is None:
            text = ""
        elif isinstance(body, str):
            text = body
        else:
            text = json.dumps(body)
        response = ApiResponse(
            status=status,
            text=text,
            headers=CaseInsensitiveDict(headers or {"Content-Type": JSON}),
            duration_ms=5.0,
        )
        self._routes.insert(0, (method.upper(), re.compile(path), response))

    def request(self, method, path, *, token=None, json=None, params=None,
                accept=JSON, name=None) -> ApiResponse:
        self.calls.append(RecordedCall(method.upper(), path, token, json, params, accept, name))
        for route_method, pattern, response in self._routes:
            if route_method == method.upper() and pattern.fullmatch(path):
                result = response
                break
        else:
            result = ApiResponse(status=200, text="[]",
                                 headers=CaseInsensitiveDict({"Content-Type": JSON}),
                                 duration_ms=5.0)
        if self.metrics is not None:
            self.metrics.trend("http_req_duration").add(result.duration_ms)
            self.metrics.rate("http_req_failed").add(not result.ok)
        return result

    def close(self) -> None:
        self.closed = True

    def paths(self, method: str | None = None) -> list[str]:
        return [c.path for c in self.calls if method is None or c.method == method]

    def requests(self) -> list[tuple[str, str]]:
        return [(c.method, c.path) for c in self.calls]


class ScriptedRandom(random.Random):
    """random() replays a fixed sequence, cycling.

    Overriding random() makes randint(), choice() and uniform() derive
    from it as well, so every draw in an iteration is scripted.
    """

    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)
        self._index = 0

    def random(self):
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


@pytest.fixture
def metrics():
    return MetricsRegistry()


@pytest.fixture
def context(metrics):
    return SharedTestContext(auth_token="admin-token", base_url="http://backend", metrics=metrics)


@pytest.fixture
def fake_client(metrics):
    return FakeApiClient(metrics)


@pytest.fixture
def pauses():
    """Collects every pause requested by scenario code instead of sleeping."""
    return []


@pytest.fixture
def make_steps(fake_client, context, pauses):
    """Factory for a StepRunner bound to the fake client and the test context."""
    def factory(domain: str, rng: random.Random | None = None) -> StepRunner:
        return StepRunner(fake_client, "admin-token", context, domain,
                          rng=rng or random.Random(7), sleep=pauses.append)
    return factory
