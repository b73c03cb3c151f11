"""Run-wide shared state handed to every virtual-user iteration."""

import threading
from dataclasses import dataclass, field
from typing import Any

from .metrics import MetricsRegistry

RESOURCE_CATEGORIES = ("courses", "teachers", "students", "admins", "programs", "sections")


class ResourceLedger:
    """Identifiers of resources created during the run, by category.

    Appends are serialized by a lock so concurrent virtual users never
    lose an entry. Only the count per category is reported; insertion
    order across threads is not meaningful.
    """

    def __init__(self, categories: tuple[str, ...] = RESOURCE_CATEGORIES):
        self._lock = threading.Lock()
        self._ids: dict[str, list[Any]] = {category: [] for category in categories}

    def record(self, category: str, resource_id: Any) -> None:
        with self._lock:
            try:
                self._ids[category].append(resource_id)
            except KeyError:
                raise KeyError(f"Unknown resource category '{category}'") from None

    def count(self, category: str) -> int:
        with self._lock:
            return len(self._ids[category])

    def ids(self, category: str) -> list[Any]:
        """Return a copy of the identifiers recorded for ``category``."""
        with self._lock:
            return list(self._ids[category])

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._ids)

    def summary(self) -> dict[str, int]:
        with self._lock:
            return {category: len(ids) for category, ids in self._ids.items()}


@dataclass(frozen=True)
class SharedTestContext:
    """Created once by setup(), read by every iteration and by teardown().

    The token and base URL never change during a run; the ledger and the
    metrics registry are internally synchronized.
    """
    auth_token: str | None
    base_url: str
    created_resource_ids: ResourceLedger = field(default_factory=ResourceLedger)
    metrics: MetricsRegistry = field(default_factory=MetricsRegistry)
