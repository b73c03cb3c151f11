"""Parametric domain: read-only lookup tables.

Every lookup follows the same list-then-fetch-one pattern, so the
operations are generated from a table rather than written out by hand.
"""

from ..checks import body_not_empty, first_item_has, is_list, status_is
from ..steps import StepRunner
from ._registry import Domain, operation

# (operation name, path segment, highest seeded id, weight)
LOOKUPS = [
    ("status", "statuses", 5, 20),
    ("role", "roles", 4, 15),
    ("document_type", "document-types", 3, 20),
    ("employment_type", "employment-types", 2, 15),
    ("modality", "modalities", 2, 15),
    ("classroom_type", "classroom-types", 3, 15),
]


def list_then_get(steps: StepRunner, name: str, segment: str, max_id: int) -> None:
    trend = f"parametric_{name}_duration_ms"
    path = f"/parametric/{segment}"

    steps.call(
        "GET", path, trend=trend, operation=f"{name}_get_all",
        checks={
            f"get all {segment} (200)": status_is(200),
            f"{segment} list is array": is_list(),
            f"{segment} have id": first_item_has("id"),
            f"{segment} have name": first_item_has("name"),
        },
    )
    steps.pause(0.2)

    item_id = steps.randint(1, max_id)
    steps.call(
        "GET", f"{path}/{item_id}", trend=trend, operation=f"{name}_get_by_id",
        checks={
            f"get {name} by id (200)": status_is(200),
            f"{name} body not empty": body_not_empty(),
        },
    )


def _register(name: str, segment: str, max_id: int, weight: int) -> None:
    def lookup(steps: StepRunner) -> None:
        list_then_get(steps, name, segment, max_id)

    lookup.__name__ = f"{name}_lookup"
    operation(Domain.PARAMETRIC, name, weight=weight)(lookup)


for _name, _segment, _max_id, _weight in LOOKUPS:
    _register(_name, _segment, _max_id, _weight)
