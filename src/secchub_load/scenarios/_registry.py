"""Scenario registry: domains, operation decorator, storage, and selection.

Domain modules register their operations by importing and using the
@operation decorator. The __init__.py auto-discovers all .py files in
this package so no manual registration is needed.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..selector import RandomSource, WeightedOption, select


class Domain(str, Enum):
    """Top-level scenario domains, in selection order."""
    ADMIN = "admin"
    SECURITY = "security"
    PARAMETRIC = "parametric"
    NOTIFICATION = "notification"
    LOG = "log"
    INTEGRATION = "integration"
    PLANNING = "planning"

    @property
    def weight(self) -> int:
        return DOMAIN_WEIGHTS[self]


# Relative share of iterations per domain; they sum to 95, selection divides by the total
DOMAIN_WEIGHTS: dict[Domain, int] = {
    Domain.ADMIN: 14,
    Domain.SECURITY: 10,
    Domain.PARAMETRIC: 5,
    Domain.NOTIFICATION: 5,
    Domain.LOG: 1,
    Domain.INTEGRATION: 30,
    Domain.PLANNING: 30,
}


@dataclass
class Operation:
    """A registered operation within a domain scenario."""
    domain: Domain
    name: str
    weight: int
    func: Callable


_operations: dict[Domain, list[Operation]] = {domain: [] for domain in Domain}


def operation(domain: Domain | str, name: str, weight: int = 10):
    """Decorator to register a function as an operation of ``domain``."""
    domain = Domain(domain)

    def decorator(func: Callable) -> Callable:
        _operations[domain].append(Operation(
            domain=domain,
            name=name,
            weight=weight,
            func=func,
        ))
        return func
    return decorator


def get_operations(domain: Domain | str | None = None) -> list[Operation]:
    """Return registered operations, for one domain or all of them."""
    if domain is None:
        return [op for ops in _operations.values() for op in ops]
    return list(_operations[Domain(domain)])


def validate_registry() -> None:
    """Raise RuntimeError if a domain has no operations or a weight is negative."""
    missing = [domain.value for domain, ops in _operations.items() if not ops]
    if missing:
        raise RuntimeError(f"No operations registered for: {', '.join(missing)}")
    negative = [f"{op.domain.value}/{op.name}"
                for ops in _operations.values() for op in ops if op.weight < 0]
    if negative:
        raise RuntimeError(f"Negative operation weight: {', '.join(negative)}")


def domain_options() -> list[WeightedOption[Domain]]:
    return [WeightedOption(domain.weight, domain.value, domain) for domain in Domain]


def pick_domain(rng: RandomSource | None = None) -> Domain:
    """Select a domain based on the top-level weights."""
    return select(domain_options(), rng or random).value


def pick_operation(domain: Domain | str, rng: RandomSource | None = None) -> Operation:
    """Select one of ``domain``'s operations based on their weights."""
    ops = _operations[Domain(domain)]
    if not ops:
        raise RuntimeError(f"No operations registered for domain '{Domain(domain).value}'")
    options = [WeightedOption(op.weight, op.name, op) for op in ops]
    return select(options, rng or random).value
