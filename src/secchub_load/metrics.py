"""In-process metrics: counters, rates, trends, and threshold evaluation.

Every metric is safe to update from many virtual-user threads at once.
Nothing is exported; the runner logs a summary at the end of the run and
evaluates the configured thresholds against it.
"""

import logging
import operator
import re
import threading
from dataclasses import dataclass
from typing import Callable

import numpy as np

log = logging.getLogger(__name__)

TagKey = tuple[tuple[str, str], ...]


def _tag_key(tags: dict[str, str] | None) -> TagKey:
    if not tags:
        return ()
    return tuple(sorted((str(k), str(v)) for k, v in tags.items()))


class Counter:
    """Monotonic sum, with a per-tag-set breakdown."""

    kind = "counter"

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._total = 0.0
        self._by_tags: dict[TagKey, float] = {}

    def add(self, value: float = 1, tags: dict[str, str] | None = None) -> None:
        key = _tag_key(tags)
        with self._lock:
            self._total += value
            self._by_tags[key] = self._by_tags.get(key, 0.0) + value

    @property
    def count(self) -> float:
        with self._lock:
            return self._total

    def by_tag(self, tag: str) -> dict[str, float]:
        """Return totals grouped by the value of a single tag."""
        grouped: dict[str, float] = {}
        with self._lock:
            for key, value in self._by_tags.items():
                for k, v in key:
                    if k == tag:
                        grouped[v] = grouped.get(v, 0.0) + value
        return grouped

    def stats(self) -> dict[str, float]:
        return {"count": self.count}


class Rate:
    """Fraction of non-zero samples."""

    kind = "rate"

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._hits = 0
        self._total = 0
        self._by_tags: dict[TagKey, list[int]] = {}

    def add(self, value: bool, tags: dict[str, str] | None = None) -> None:
        key = _tag_key(tags)
        hit = 1 if value else 0
        with self._lock:
            self._hits += hit
            self._total += 1
            bucket = self._by_tags.setdefault(key, [0, 0])
            bucket[0] += hit
            bucket[1] += 1

    @property
    def count(self) -> int:
        with self._lock:
            return self._total

    @property
    def hits(self) -> int:
        with self._lock:
            return self._hits

    @property
    def rate(self) -> float:
        with self._lock:
            if self._total == 0:
                return 0.0
            return self._hits / self._total

    def stats(self) -> dict[str, float]:
        with self._lock:
            rate = self._hits / self._total if self._total else 0.0
            return {"rate": rate, "count": self._total, "hits": self._hits}


class Trend:
    """Distribution of samples (durations in milliseconds, usually)."""

    kind = "trend"

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._values: list[float] = []

    def add(self, value: float, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            self._values.append(float(value))

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._values)

    def percentile(self, pct: float) -> float:
        """Linear-interpolated percentile; 0.0 when there are no samples."""
        with self._lock:
            values = np.array(self._values, dtype=float)
        if values.size == 0:
            return 0.0
        return float(np.percentile(values, pct))

    def stats(self) -> dict[str, float]:
        with self._lock:
            values = np.array(self._values, dtype=float)
        if values.size == 0:
            return {"count": 0, "avg": 0.0, "min": 0.0, "med": 0.0, "max": 0.0,
                    "p(90)": 0.0, "p(95)": 0.0, "p(99)": 0.0}
        p50, p90, p95, p99 = np.percentile(values, [50, 90, 95, 99])
        return {
            "count": int(values.size),
            "avg": float(np.mean(values)),
            "min": float(np.min(values)),
            "med": float(p50),
            "max": float(np.max(values)),
            "p(90)": float(p90),
            "p(95)": float(p95),
            "p(99)": float(p99),
        }


Metric = Counter | Rate | Trend


class MetricsRegistry:
    """Get-or-create store of named metrics, shared by all virtual users."""

    def __init__(self):
        self._lock = threading.Lock()
        self._metrics: dict[str, Metric] = {}

    def _get(self, name: str, cls: type) -> Metric:
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = cls(name)
                self._metrics[name] = metric
            elif not isinstance(metric, cls):
                raise TypeError(
                    f"Metric '{name}' already registered as {metric.kind}"
                )
            return metric

    def counter(self, name: str) -> Counter:
        return self._get(name, Counter)

    def rate(self, name: str) -> Rate:
        return self._get(name, Rate)

    def trend(self, name: str) -> Trend:
        return self._get(name, Trend)

    def get(self, name: str) -> Metric | None:
        with self._lock:
            return self._metrics.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._metrics)

    def log_summary(self) -> None:
        """Log one line per metric, in name order."""
        for name in self.names():
            metric = self.get(name)
            stats = metric.stats()
            if isinstance(metric, Trend):
                log.info(
                    "  %-45s avg=%.1f min=%.1f med=%.1f max=%.1f p(95)=%.1f count=%d",
                    name, stats["avg"], stats["min"], stats["med"], stats["max"],
                    stats["p(95)"], stats["count"],
                )
            elif isinstance(metric, Rate):
                log.info("  %-45s rate=%.2f%% (%d/%d)",
                         name, stats["rate"] * 100, stats["hits"], stats["count"])
            else:
                log.info("  %-45s count=%d", name, stats["count"])


# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "<=": operator.le,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    ">": operator.gt,
}

_THRESHOLD_RE = re.compile(
    r"^\s*(?P<agg>rate|count|avg|min|max|med|p\(\s*\d+(?:\.\d+)?\s*\))"
    r"\s*(?P<op><=|>=|==|!=|<|>)\s*(?P<value>-?\d+(?:\.\d+)?)\s*$"
)


@dataclass(frozen=True)
class Threshold:
    """A single pass/fail expression such as 'rate<0.05' or 'p(95)<1000'."""
    expression: str
    aggregation: str
    op: str
    value: float

    @classmethod
    def parse(cls, expression: str) -> "Threshold":
        match = _THRESHOLD_RE.match(expression)
        if not match:
            raise ValueError(f"Invalid threshold expression: {expression!r}")
        aggregation = match.group("agg").replace(" ", "")
        return cls(
            expression=expression.strip(),
            aggregation=aggregation,
            op=match.group("op"),
            value=float(match.group("value")),
        )

    def observe(self, metric: Metric) -> float:
        """Return the aggregated value of ``metric`` this threshold compares."""
        if self.aggregation.startswith("p("):
            if not isinstance(metric, Trend):
                raise ValueError(f"{self.aggregation} needs a trend, '{metric.name}' is a {metric.kind}")
            return metric.percentile(float(self.aggregation[2:-1]))
        stats = metric.stats()
        if self.aggregation not in stats:
            raise ValueError(f"'{self.aggregation}' is not available on {metric.kind} '{metric.name}'")
        return float(stats[self.aggregation])

    def check(self, metric: Metric) -> bool:
        return _OPERATORS[self.op](self.observe(metric), self.value)


@dataclass
class ThresholdResult:
    metric: str
    expression: str
    passed: bool
    observed: float | None = None
    skipped: bool = False


def evaluate_thresholds(registry: MetricsRegistry,
                        rules: dict[str, list[str]]) -> list[ThresholdResult]:
    """Evaluate every rule against the registry.

    Rules for metrics that never received a sample are skipped rather
    than failed.
    """
    results = []
    for metric_name, expressions in rules.items():
        metric = registry.get(metric_name)
        for expression in expressions:
            threshold = Threshold.parse(expression)
            if metric is None or metric.count == 0:
                results.append(ThresholdResult(metric_name, threshold.expression,
                                               passed=True, skipped=True))
                continue
            observed = threshold.observe(metric)
            passed = _OPERATORS[threshold.op](observed, threshold.value)
            results.append(ThresholdResult(metric_name, threshold.expression,
                                           passed=passed, observed=observed))
    return results


def log_threshold_results(results: list[ThresholdResult]) -> bool:
    """Log each result and return True when none failed."""
    all_passed = True
    for result in results:
        if result.skipped:
            log.info("  %-25s %-15s SKIPPED (no samples)", result.metric, result.expression)
        elif result.passed:
            log.info("  %-25s %-15s PASS (%.4g)", result.metric, result.expression, result.observed)
        else:
            all_passed = False
            log.warning("  %-25s %-15s FAIL (%.4g)", result.metric, result.expression, result.observed)
    return all_passed
