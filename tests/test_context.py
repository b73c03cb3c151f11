"""
Unit tests for the shared run context and its resource ledger.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from secchub_load.context import RESOURCE_CATEGORIES, ResourceLedger, SharedTestContext


pytestmark = pytest.mark.unit


def test_ledger_starts_empty_for_every_category():
    ledger = ResourceLedger()
    assert ledger.summary() == {category: 0 for category in RESOURCE_CATEGORIES}


def test_ledger_unknown_category_raises():
    ledger = ResourceLedger()
    with pytest.raises(KeyError, match="widgets"):
        ledger.record("widgets", 1)


def test_ledger_ids_returns_copy():
    ledger = ResourceLedger()
    ledger.record("courses", 10)
    ids = ledger.ids("courses")
    ids.append(99)
    assert ledger.ids("courses") == [10]


def test_ledger_concurrent_appends_lose_nothing():
    ledger = ResourceLedger()
    workers = 50
    per_worker = 200

    def append(worker):
        for i in range(per_worker):
            ledger.record("courses", worker * per_worker + i)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(append, range(workers)))

    assert ledger.count("courses") == 10_000
    assert sorted(ledger.ids("courses")) == list(range(10_000))


def test_context_is_read_only():
    context = SharedTestContext(auth_token="t", base_url="http://x")
    with pytest.raises(AttributeError):
        context.auth_token = "other"


def test_contexts_do_not_share_ledgers():
    first = SharedTestContext(auth_token="t", base_url="http://x")
    second = SharedTestContext(auth_token="t", base_url="http://x")
    first.created_resource_ids.record("students", 1)
    assert second.created_resource_ids.count("students") == 0
