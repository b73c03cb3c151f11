"""Weighted random selection shared by the top-level and per-domain dispatch."""

import random
from dataclasses import dataclass
from typing import Generic, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class WeightedOption(Generic[T]):
    """A candidate for selection, chosen with probability weight / total."""
    weight: float
    label: str
    value: T


def select(options: Sequence[WeightedOption[T]],
           rng: RandomSource | None = None) -> WeightedOption[T]:
    """Pick one option with weight-proportional probability.

    Draws r uniformly from [0, total) and walks the options in order,
    subtracting each weight until the remainder drops to <= 0.
    Zero-weight options are never chosen by the walk. When the total is
    zero, or the walk runs off the end through float rounding, the first
    option is returned.
    """
    if not options:
        raise ValueError("select() needs at least one option")
    for option in options:
        if option.weight < 0:
            raise ValueError(f"Option '{option.label}' has negative weight {option.weight}")

    total = sum(option.weight for option in options)
    if total <= 0:
        return options[0]

    source = rng if rng is not None else random
    remainder = source.random() * total
    for option in options:
        if option.weight == 0:
            continue
        remainder -= option.weight
        if remainder <= 0:
            return option
    return options[0]
