"""One virtual-user iteration: pick a domain, pick an operation, run it, think."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable

from .client import ApiClient
from .context import SharedTestContext
from .scenarios import pick_domain, pick_operation
from .steps import StepRunner
from .tracing import operation_span, record_checks

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioOutcome:
    domain: str
    operation: str
    ok: bool
    failed_checks: int
    duration_ms: float


def run_iteration(context: SharedTestContext, client: ApiClient, *,
                  rng: random.Random | None = None,
                  sleep: Callable[[float], Any] = time.sleep,
                  think_time: tuple[float, float] = (1.0, 3.0)) -> ScenarioOutcome | None:
    """Run one weighted-random operation against the backend.

    Returns None without touching the network when the run has no admin
    token. Otherwise the selected operation runs to completion (failed
    checks never abort it) and the iteration ends with a think-time pause.
    """
    if not context.auth_token:
        log.error("No auth token available, skipping iteration")
        return None

    rng = rng or random.Random()
    domain = pick_domain(rng)
    op = pick_operation(domain, rng)

    steps = StepRunner(client, context.auth_token, context, domain.value, rng=rng, sleep=sleep)
    metrics = context.metrics

    started = time.perf_counter()
    with operation_span(domain.value, op.name) as span:
        op.func(steps)
        record_checks(span, steps.calls, steps.failures)
    duration_ms = (time.perf_counter() - started) * 1000.0

    metrics.counter("operations_by_module").add(1, tags={"module": domain.value})
    metrics.counter("iterations").add(1)
    metrics.trend("iteration_duration").add(duration_ms)

    log.debug("%s.%s finished in %.0fms (%d calls, %d failed)",
              domain.value, op.name, duration_ms, steps.calls, steps.failures)

    sleep(rng.uniform(*think_time))

    return ScenarioOutcome(
        domain=domain.value,
        operation=op.name,
        ok=steps.failures == 0,
        failed_checks=steps.failures,
        duration_ms=duration_ms,
    )
