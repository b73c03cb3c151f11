"""HTTP access to the backend under test.

Each virtual user owns one ApiClient (and so one requests.Session).
Transport failures such as timeouts or refused connections never raise
out of request(); they come back as a status-0 ApiResponse so the
caller's checks simply fail.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests
from requests.structures import CaseInsensitiveDict

from .metrics import MetricsRegistry

log = logging.getLogger(__name__)

JSON = "application/json"
NDJSON = "application/x-ndjson"

_MISSING = object()


@dataclass
class ApiResponse:
    """The parts of an HTTP response the scenarios look at."""
    status: int
    text: str = ""
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    duration_ms: float = 0.0
    error: str | None = None

    def json(self) -> Any:
        """Parse the body as JSON. Raises ValueError on malformed bodies."""
        return json.loads(self.text)

    def json_field(self, name: str, default: Any = None) -> Any:
        """Return a top-level field of a JSON object body, or ``default``."""
        try:
            body = self.json()
        except ValueError:
            return default
        if not isinstance(body, dict):
            return default
        return body.get(name, default)

    def has_json_field(self, name: str) -> bool:
        return self.json_field(name, _MISSING) is not _MISSING

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")

    def ndjson_lines(self) -> int:
        """Count non-empty lines of an NDJSON body; 0 for non-200 responses."""
        if self.status != 200:
            return 0
        return sum(1 for line in self.text.split("\n") if line.strip())


class ApiClient:
    """Thin wrapper around a requests.Session bound to one base URL."""

    def __init__(self, base_url: str, timeout: float = 60.0,
                 metrics: MetricsRegistry | None = None,
                 session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.metrics = metrics
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def request(self, method: str, path: str, *,
                token: str | None = None,
                json: Any = None,
                params: dict[str, Any] | None = None,
                accept: str = JSON,
                name: str | None = None) -> ApiResponse:
        """Issue one request and return an ApiResponse; never raises for transport errors.

        Args:
            method: HTTP verb.
            path: Path below the base URL, e.g. "/courses/12".
            token: Bearer token; omitted from headers when None.
            json: JSON-serializable request body.
            params: Query-string parameters.
            accept: Value of the Accept header.
            name: Operation tag used in debug logs.
        """
        headers = {"Accept": accept, "Content-Type": JSON}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        started = time.perf_counter()
        try:
            resp = self._session.request(
                method, url,
                headers=headers,
                json=json,
                params=params,
                timeout=self.timeout,
            )
            result = ApiResponse(
                status=resp.status_code,
                text=resp.text,
                headers=resp.headers,
                duration_ms=(time.perf_counter() - started) * 1000.0,
            )
        except requests.RequestException as exc:
            result = ApiResponse(
                status=0,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                error=f"{type(exc).__name__}: {exc}",
            )
            log.debug("%s %s (%s) failed: %s", method, path, name or "-", result.error)

        if self.metrics is not None:
            self.metrics.trend("http_req_duration").add(result.duration_ms)
            self.metrics.rate("http_req_failed").add(not result.ok)
            self.metrics.counter("http_reqs").add(1)

        log.debug("%s %s (%s) -> %d in %.1fms",
                  method, path, name or "-", result.status, result.duration_ms)
        return result
