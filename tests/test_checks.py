"""
Unit tests for named response checks.
"""

import pytest
from requests.structures import CaseInsensitiveDict

from secchub_load.checks import (
    body_not_empty,
    check,
    content_type_includes,
    field_equals,
    first_item_has,
    has_field,
    if_status,
    is_list,
    non_empty_list,
    status_is,
    status_is_not,
)
from secchub_load.client import ApiResponse
from secchub_load.metrics import MetricsRegistry


pytestmark = pytest.mark.unit


def _response(status=200, text="", content_type="application/json"):
    return ApiResponse(status=status, text=text,
                       headers=CaseInsensitiveDict({"Content-Type": content_type}))


def test_all_checks_run_even_after_a_failure():
    metrics = MetricsRegistry()
    response = _response(500, '{"error": "x"}')

    passed = check(response, {
        "status is 200": status_is(200),
        "has error": has_field("error"),
    }, metrics=metrics, tags={"module": "admin"})

    assert passed is False
    checks = metrics.rate("checks")
    assert checks.count == 2
    assert checks.hits == 1


def test_malformed_json_counts_as_failed_check():
    response = _response(200, "<html>oops</html>")

    assert check(response, {"is list": is_list()}) is False
    assert check(response, {"first has id": first_item_has("id")}) is False
    assert check(response, {"has id": has_field("id")}) is False


def test_status_predicates():
    assert status_is(200, 404)(_response(404))
    assert not status_is(201)(_response(200))
    assert status_is_not(500)(_response(503))
    assert not status_is_not(500)(_response(500))


def test_field_predicates():
    response = _response(200, '{"id": 7, "credits": 4}')

    assert has_field("credits")(response)
    assert field_equals("id", 7)(response)
    assert not field_equals("id", "7")(response)
    assert not has_field("name")(response)


def test_field_present_with_null_value_counts_as_present():
    assert has_field("id")(_response(200, '{"id": null}'))


def test_list_predicates():
    assert is_list()(_response(200, "[]"))
    assert not non_empty_list()(_response(200, "[]"))
    assert non_empty_list()(_response(200, "[1]"))
    assert first_item_has("name")(_response(200, '[{"id": 1, "name": "a"}]'))
    assert not first_item_has("name")(_response(200, "[]"))
    assert not first_item_has("id")(_response(200, '"identity"'))
    assert not first_item_has("id")(_response(200, '["identity"]'))
    assert not first_item_has("id")(_response(200, '{"id": 1}'))


def test_body_and_content_type():
    assert body_not_empty()(_response(200, "1"))
    assert not body_not_empty()(_response(200, ""))
    ndjson = _response(200, "", content_type="application/x-ndjson;charset=UTF-8")
    assert content_type_includes("application/x-ndjson")(ndjson)


def test_if_status_only_applies_to_matching_status():
    predicate = if_status(200, field_equals("id", 3))

    assert predicate(_response(404, "not found"))
    assert predicate(_response(200, '{"id": 3}'))
    assert not predicate(_response(200, '{"id": 4}'))
