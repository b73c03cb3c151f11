"""Named response assertions.

A check set is a dict of {name: predicate}. Every predicate is run (no
short-circuit) so each name gets its own pass/fail sample in the
``checks`` rate. A predicate that blows up while reading the body, e.g.
on malformed JSON, counts as a failed assertion.
"""

import logging
from typing import Any, Callable

from .client import ApiResponse
from .metrics import MetricsRegistry

log = logging.getLogger(__name__)

Predicate = Callable[[ApiResponse], bool]

_EVALUATION_ERRORS = (ValueError, KeyError, TypeError, IndexError, AttributeError)


def check(response: ApiResponse, checks: dict[str, Predicate], *,
          metrics: MetricsRegistry | None = None,
          tags: dict[str, str] | None = None) -> bool:
    """Run all checks against ``response`` and return True if every one passed."""
    all_passed = True
    for name, predicate in checks.items():
        try:
            passed = bool(predicate(response))
        except _EVALUATION_ERRORS as exc:
            log.debug("Check '%s' could not be evaluated: %s", name, exc)
            passed = False

        if not passed:
            all_passed = False
            log.debug("Check failed: '%s' (status=%d)", name, response.status)

        if metrics is not None:
            check_tags = dict(tags or {})
            check_tags["check"] = name
            metrics.rate("checks").add(passed, tags=check_tags)
    return all_passed


def status_is(*codes: int) -> Predicate:
    return lambda r: r.status in codes


def status_is_not(code: int) -> Predicate:
    return lambda r: r.status != code


def has_field(name: str) -> Predicate:
    return lambda r: r.has_json_field(name)


def field_equals(name: str, expected: Any) -> Predicate:
    return lambda r: r.has_json_field(name) and r.json_field(name) == expected


def is_list() -> Predicate:
    return lambda r: isinstance(r.json(), list)


def non_empty_list() -> Predicate:
    def predicate(r: ApiResponse) -> bool:
        body = r.json()
        return isinstance(body, list) and len(body) > 0
    return predicate


def first_item_has(name: str) -> Predicate:
    """The body is a non-empty list whose first element carries ``name``."""
    def predicate(r: ApiResponse) -> bool:
        body = r.json()
        return (isinstance(body, list) and len(body) > 0
                and isinstance(body[0], dict) and name in body[0])
    return predicate


def body_not_empty() -> Predicate:
    return lambda r: len(r.text) > 0


def content_type_includes(fragment: str) -> Predicate:
    return lambda r: fragment in r.content_type


def if_status(code: int, predicate: Predicate) -> Predicate:
    """Apply ``predicate`` only when the status is ``code``; pass otherwise."""
    return lambda r: predicate(r) if r.status == code else True
