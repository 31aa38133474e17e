"""
Running rating statistics per entity.

Accumulates first and second moments so that mean and population standard
deviation can be read at any time without revisiting the ratings. Instances are
built fresh per aggregation run or ingest call and never shared.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from math import sqrt
from typing import Iterable, Optional

from ratingwatch.core.exceptions import EmptyStatistics


@dataclass
class EntityStatistics:
    """
    Sum / sum-of-squares accumulator.

    std_dev() is exactly 0.0 for a single sample and for any run of identical
    ratings; the variance formula alone can leave cancellation noise there.
    """

    sum: float = 0.0
    sum_of_squares: float = 0.0
    count: int = 0
    _first: Optional[float] = field(default=None, init=False, repr=False)
    _uniform: bool = field(default=True, init=False, repr=False)

    @classmethod
    def from_ratings(cls, ratings: Iterable[float]) -> "EntityStatistics":
        stats = cls()
        for rating in ratings:
            stats.update(rating)
        return stats

    def update(self, rating: float) -> None:
        rating = float(rating)
        if self._first is None:
            self._first = rating
        elif rating != self._first:
            self._uniform = False
        self.sum += rating
        self.sum_of_squares += rating * rating
        self.count += 1

    def merge(self, other: "EntityStatistics") -> "EntityStatistics":
        """Return a new accumulator holding the ratings of both operands."""
        merged = EntityStatistics(
            sum=self.sum + other.sum,
            sum_of_squares=self.sum_of_squares + other.sum_of_squares,
            count=self.count + other.count,
        )
        if self.is_empty:
            merged._first, merged._uniform = other._first, other._uniform
        elif other.is_empty:
            merged._first, merged._uniform = self._first, self._uniform
        elif self._first is not None and other._first is not None:
            merged._first = self._first
            merged._uniform = self._uniform and other._uniform and self._first == other._first
        return merged

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def mean(self) -> float:
        if self.count == 0:
            raise EmptyStatistics("mean requested from statistics with no samples")
        return self.sum / self.count

    def variance(self) -> float:
        mean = self.mean()
        if self.count == 1:
            return 0.0
        # Records built from raw accumulators have no _first and use the formula.
        if self._first is not None and self._uniform:
            return 0.0
        # Clamp: float error can push a near-zero variance below zero.
        return max(self.sum_of_squares / self.count - mean * mean, 0.0)

    def std_dev(self) -> float:
        if self.count == 0:
            raise EmptyStatistics("std_dev requested from statistics with no samples")
        return sqrt(self.variance())
