"""Per-call execution protocol used inside every scenario operation."""

import logging
import random
import time
from typing import Any, Callable

from .checks import Predicate, check
from .client import JSON, ApiClient, ApiResponse
from .context import SharedTestContext

log = logging.getLogger(__name__)


class StepRunner:
    """Issues the HTTP calls of one operation on behalf of one virtual user.

    Every call records its duration in a named trend, runs its checks,
    and feeds the result into the domain's error rate (``<domain>_errors``)
    and the run-wide ``errors`` rate. Calls are never retried.
    """

    def __init__(self, client: ApiClient, token: str, context: SharedTestContext,
                 domain: str, *,
                 rng: random.Random | None = None,
                 sleep: Callable[[float], Any] = time.sleep):
        self.client = client
        self.token = token
        self.context = context
        self.domain = domain
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._metrics = context.metrics
        self.calls = 0
        self.failures = 0

    def call(self, method: str, path: str, *,
             trend: str,
             checks: dict[str, Predicate],
             operation: str,
             json: Any = None,
             params: dict[str, Any] | None = None,
             token: str | None = None,
             auth: bool = True,
             accept: str = JSON) -> tuple[ApiResponse, bool]:
        """Issue one request and evaluate its checks.

        ``token`` overrides the runner's token for this call; ``auth=False``
        sends no Authorization header at all. Returns the response and
        whether all checks passed.
        """
        response = self.client.request(
            method, path,
            token=(token or self.token) if auth else None,
            json=json,
            params=params,
            accept=accept,
            name=operation,
        )
        self.calls += 1
        self._metrics.trend(trend).add(response.duration_ms)

        tags = {"module": self.domain, "operation": operation}
        ok = check(response, checks, metrics=self._metrics, tags=tags)
        self._metrics.rate(f"{self.domain}_errors").add(not ok, tags=tags)
        self._metrics.rate("errors").add(not ok, tags=tags)

        if not ok:
            self.failures += 1
            log.debug("%s %s [%s] failed checks (status=%d)",
                      method, path, operation, response.status)
        return response, ok

    def record(self, category: str, resource_id: Any) -> None:
        """Remember a created resource in the run-wide ledger."""
        self.context.created_resource_ids.record(category, resource_id)

    def pause(self, seconds: float) -> None:
        self._sleep(seconds)

    def pick(self, items: list) -> Any:
        return self.rng.choice(items)

    def randint(self, low: int, high: int) -> int:
        """Inclusive random integer, for ids and payload values."""
        return self.rng.randint(low, high)

    def unique_id(self) -> str:
        """Timestamp plus random suffix, for collision-free resource names."""
        return f"{int(time.time() * 1000)}_{self.rng.randint(0, 9999)}"
