"""Load generation runner: manages virtual users and the run lifecycle.

One thread per virtual user (VU); every VU owns its own ApiClient so no
HTTP session is shared between threads. A controller loop follows the
stage profile, starting VUs up to the current target and retiring the
surplus. Retired VUs finish their current iteration before exiting.
"""

import logging
import random
import signal
import threading
import time
from typing import Callable

from .client import ApiClient
from .config import Config
from .context import SharedTestContext
from .executor import ScenarioOutcome, run_iteration
from .scenarios import get_operations
from .scheduler import max_vus, target_vus, total_duration

log = logging.getLogger(__name__)


class _VirtualUser:
    """A worker thread running iterations until its stop event is set."""

    def __init__(self, vu_id: int, runner: "LoadRunner"):
        self.vu_id = vu_id
        self.stop_event = threading.Event()
        self.thread = threading.Thread(
            target=runner._vu_loop, args=(self,), daemon=True, name=f"vu-{vu_id}",
        )

    def pause(self, seconds: float) -> None:
        # Returns early when the VU is told to stop
        self.stop_event.wait(timeout=seconds)


class LoadRunner:
    """Manages the load generation lifecycle."""

    def __init__(self, config: Config, context: SharedTestContext, *,
                 client_factory: Callable[[], ApiClient] | None = None,
                 iteration: Callable[..., ScenarioOutcome | None] = run_iteration,
                 tick: float = 1.0,
                 stats_interval: float = 10.0):
        self.config = config
        self.context = context
        self.stages = config.stage_profile
        self._client_factory = client_factory or self._default_client
        self._iteration = iteration
        self._tick = tick
        self._stats_interval = stats_interval

        self._stop_event = threading.Event()
        self._vus: list[_VirtualUser] = []
        self._retired: list[_VirtualUser] = []
        self._next_vu_id = 1

        self._stats_lock = threading.Lock()
        self._stats = {
            "total": 0,
            "success": 0,
            "error": 0,
            "by_operation": {},
        }

    def _default_client(self) -> ApiClient:
        return ApiClient(
            self.config.base_url,
            timeout=self.config.request_timeout,
            metrics=self.context.metrics,
        )

    @property
    def active_vus(self) -> int:
        return len(self._vus)

    def stats(self) -> dict:
        """Return a snapshot of the iteration counters."""
        with self._stats_lock:
            snapshot = dict(self._stats)
            snapshot["by_operation"] = {
                name: dict(counts) for name, counts in self._stats["by_operation"].items()
            }
            return snapshot

    def run(self, install_signal_handlers: bool = True) -> None:
        """Follow the stage profile until it ends or stop() is called. Blocks."""
        if install_signal_handlers:
            self._install_signal_handlers()

        operations = get_operations()
        log.info("Registered %d operations across %d domains",
                 len(operations), len({op.domain for op in operations}))

        duration = total_duration(self.stages)
        log.info("Load generation started (duration=%.0fs, max VUs=%d)",
                 duration, max_vus(self.stages))

        stats_thread = threading.Thread(target=self._stats_logger, daemon=True, name="stats-logger")
        stats_thread.start()

        started = time.monotonic()
        while not self._stop_event.is_set():
            elapsed = time.monotonic() - started
            if elapsed >= duration:
                break
            try:
                self._scale_to(target_vus(self.stages, elapsed))
            except Exception:
                log.exception("Unexpected error in controller loop")
            self._stop_event.wait(timeout=self._tick)

        self._stop_event.set()
        self._shutdown_vus()

        log.info("Load generation stopped")
        self._log_final_stats()

    def stop(self) -> None:
        """Signal the runner to stop."""
        log.info("Stop requested, finishing current iterations...")
        self._stop_event.set()

    def _scale_to(self, target: int) -> None:
        """Start or retire VUs so that exactly ``target`` are active."""
        while len(self._vus) < target:
            vu = _VirtualUser(self._next_vu_id, self)
            self._next_vu_id += 1
            self._vus.append(vu)
            vu.thread.start()
            log.debug("Started VU %d (active=%d)", vu.vu_id, len(self._vus))

        while len(self._vus) > target:
            vu = self._vus.pop()
            vu.stop_event.set()
            self._retired.append(vu)
            log.debug("Retiring VU %d (active=%d)", vu.vu_id, len(self._vus))

    def _shutdown_vus(self) -> None:
        """Stop every VU and wait up to graceful_stop seconds for them."""
        self._scale_to(0)
        deadline = time.monotonic() + self.config.graceful_stop
        for vu in self._retired:
            vu.thread.join(timeout=max(0.0, deadline - time.monotonic()))

        stuck = [vu.vu_id for vu in self._retired if vu.thread.is_alive()]
        if stuck:
            log.warning("%d VUs still running after %.0fs graceful stop: %s",
                        len(stuck), self.config.graceful_stop, stuck)

    def _vu_loop(self, vu: _VirtualUser) -> None:
        client = self._client_factory()
        rng = random.Random()
        try:
            while not vu.stop_event.is_set():
                try:
                    outcome = self._iteration(
                        self.context, client,
                        rng=rng,
                        sleep=vu.pause,
                        think_time=self.config.think_time,
                    )
                except Exception:
                    log.warning("VU %d iteration failed", vu.vu_id, exc_info=True)
                    self._record(None)
                    vu.pause(self.config.think_time_min)
                    continue

                if outcome is None:
                    # Nothing to run without a token; avoid spinning
                    vu.pause(self.config.think_time_max or 1.0)
                    continue
                self._record(outcome)
        finally:
            client.close()

    def _record(self, outcome: ScenarioOutcome | None) -> None:
        name = f"{outcome.domain}/{outcome.operation}" if outcome else "unhandled"
        succeeded = outcome is not None and outcome.ok
        with self._stats_lock:
            self._stats["total"] += 1
            self._stats["success" if succeeded else "error"] += 1
            counts = self._stats["by_operation"].setdefault(name, {"success": 0, "error": 0})
            counts["success" if succeeded else "error"] += 1

    def _stats_logger(self) -> None:
        """Background thread: log stats every stats_interval seconds."""
        while not self._stop_event.is_set():
            self._stop_event.wait(timeout=self._stats_interval)
            if not self._stop_event.is_set():
                self._log_stats()

    def _log_stats(self) -> None:
        with self._stats_lock:
            log.info(
                "Stats: vus=%d total=%d success=%d error=%d",
                len(self._vus),
                self._stats["total"],
                self._stats["success"],
                self._stats["error"],
            )

    def _log_final_stats(self) -> None:
        with self._stats_lock:
            log.info("=" * 55)
            log.info("  Final Statistics")
            log.info("=" * 55)
            log.info("  Total iterations: %d", self._stats["total"])
            log.info("  Successes: %d", self._stats["success"])
            log.info("  Errors: %d", self._stats["error"])
            if self._stats["by_operation"]:
                log.info("  %-35s %8s %8s", "Operation", "OK", "Err")
                log.info("  %-35s %8s %8s", "-" * 35, "-" * 8, "-" * 8)
                for name, counts in sorted(self._stats["by_operation"].items()):
                    log.info("  %-35s %8d %8d", name, counts["success"], counts["error"])
            log.info("=" * 55)
        log.info("Metrics:")
        self.context.metrics.log_summary()

    def _install_signal_handlers(self) -> None:
        """Install SIGINT and SIGTERM handlers for graceful shutdown."""
        def handler(signum, frame):
            sig_name = signal.Signals(signum).name
            log.info("Received %s", sig_name)
            self.stop()

        signal.signal(signal.SIGINT, handler)
        signal.signal(signal.SIGTERM, handler)
