"""Weighted categorical sampling over a fixed choice set."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Generic, Iterable, Mapping, TypeVar

from synthlog.errors import EmptyChoiceSet, NonPositiveWeight
from synthlog.random_source import RandomSource

T = TypeVar("T")

# Above this many choices the cumulative bounds are searched with bisect.
LINEAR_SCAN_MAX = 16


@dataclass(frozen=True)
class WeightedChoice(Generic[T]):
    weight: int
    outcome: T


class Chooser(Generic[T]):
    """Picks outcomes with probability proportional to their weights.

    Each choice ``i`` owns the half-open interval
    ``[cumulative[i-1], cumulative[i])`` of ``[0, total)``. A draw equal to a
    bound therefore belongs to the next choice.

    Example:
        >>> statuses = Chooser.from_weights(source, {200: 70, 404: 30})
        >>> statuses.choose()
        200
    """

    def __init__(self, source: RandomSource, choices: Iterable[WeightedChoice[T]]):
        self._source = source
        self._choices = tuple(choices)
        if not self._choices:
            raise EmptyChoiceSet("chooser needs at least one weighted choice")

        cumulative = []
        total = 0
        for choice in self._choices:
            weight = choice.weight
            if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
                raise NonPositiveWeight(
                    f"weight for {choice.outcome!r} must be a positive integer, got {weight!r}"
                )
            total += weight
            cumulative.append(total)

        self._cumulative = tuple(cumulative)
        self._total = total

    @classmethod
    def from_weights(cls, source: RandomSource, weights: Mapping[T, int]) -> "Chooser[T]":
        """Build a chooser from an ``{outcome: weight}`` mapping, keeping its order."""
        return cls(source, [WeightedChoice(w, o) for o, w in weights.items()])

    @property
    def choices(self) -> tuple[WeightedChoice[T], ...]:
        return self._choices

    @property
    def total_weight(self) -> int:
        return self._total

    @property
    def probabilities(self) -> dict[T, float]:
        return {c.outcome: c.weight / self._total for c in self._choices}

    def choose(self) -> T:
        r = self._source.next(self._total)
        return self._choices[self._index_for(r)].outcome

    def _index_for(self, r: int) -> int:
        # First bound strictly greater than r.
        if len(self._cumulative) > LINEAR_SCAN_MAX:
            return bisect.bisect_right(self._cumulative, r)
        for i, bound in enumerate(self._cumulative):
            if r < bound:
                return i
        raise AssertionError(f"draw {r} outside [0, {self._total})")
