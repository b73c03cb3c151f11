"""
Integration tests for the VU runner, using a stub iteration instead of HTTP.
"""

import threading
import time

import pytest

from secchub_load.config import Config
from secchub_load.context import SharedTestContext
from secchub_load.executor import ScenarioOutcome
from secchub_load.runner import LoadRunner

from conftest import FakeApiClient


pytestmark = pytest.mark.integration


class StubIteration:
    """Counts iterations per client and sleeps through the VU's interruptible pause."""

    def __init__(self, outcome_ok=True, think=0.01, fail_every=0):
        self.lock = threading.Lock()
        self.calls = 0
        self.clients = set()
        self.outcome_ok = outcome_ok
        self.think = think
        self.fail_every = fail_every

    def __call__(self, context, client, *, rng, sleep, think_time):
        with self.lock:
            self.calls += 1
            self.clients.add(id(client))
            call = self.calls
        if self.fail_every and call % self.fail_every == 0:
            raise RuntimeError("scenario bug")
        sleep(self.think)
        return ScenarioOutcome("admin", "course", self.outcome_ok, 0 if self.outcome_ok else 1, 1.0)


def _runner(stages, iteration, clients, graceful_stop=2.0):
    config = Config(stages=stages, graceful_stop=graceful_stop,
                    think_time_min=0.0, think_time_max=0.01)
    context = SharedTestContext(auth_token="t", base_url="http://backend")

    def factory():
        client = FakeApiClient()
        clients.append(client)
        return client

    return LoadRunner(config, context, client_factory=factory, iteration=iteration,
                      tick=0.05, stats_interval=60.0)


def test_runner_ramps_vus_and_closes_clients():
    clients = []
    iteration = StubIteration()
    runner = _runner("300ms:4,300ms:4", iteration, clients)

    runner.run(install_signal_handlers=False)

    assert 1 <= len(clients) <= 4
    assert len(iteration.clients) <= len(clients)
    assert all(client.closed for client in clients)
    assert iteration.calls > 0
    stats = runner.stats()
    assert stats["total"] == stats["success"] == stats["by_operation"]["admin/course"]["success"]
    assert runner.active_vus == 0


def test_runner_counts_failed_and_crashed_iterations():
    clients = []
    iteration = StubIteration(outcome_ok=False, fail_every=3)
    runner = _runner("300ms:2", iteration, clients)

    runner.run(install_signal_handlers=False)

    stats = runner.stats()
    assert stats["success"] == 0
    assert stats["error"] == stats["total"] > 0
    assert "unhandled" in stats["by_operation"]


def test_stop_interrupts_long_pauses():
    clients = []
    iteration = StubIteration(think=30.0)
    runner = _runner("100ms:2,60s:2", iteration, clients)

    worker = threading.Thread(target=runner.run, kwargs={"install_signal_handlers": False})
    started = time.monotonic()
    worker.start()
    time.sleep(0.3)
    runner.stop()
    worker.join(timeout=5.0)

    assert not worker.is_alive()
    assert len(clients) == 2
    assert time.monotonic() - started < 5.0
    assert all(client.closed for client in clients)
