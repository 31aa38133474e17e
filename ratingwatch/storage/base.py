"""
Storage boundary for the append-only sample log.

The core only needs three operations from a store. Implementations own their
concurrency discipline; callers never hold statistics across calls.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from ratingwatch.anomaly.schema import RatingSample


@runtime_checkable
class SampleStore(Protocol):
    """
    Append-only interaction log.

    Implementations raise StorageUnavailable (or ConfigurationMissing) on
    failure and must make an appended sample visible to subsequent queries
    issued by the same caller.
    """

    def append(self, source: int, target: int, rating: float) -> RatingSample:
        """Persist a sample, assigning id and timestamp, with the stored marker at 0."""
        ...

    def query_by_source(self, source: int) -> List[float]:
        """Ratings issued by ``source``, in write order."""
        ...

    def query_all(self) -> List[RatingSample]:
        """Every persisted sample, in write order."""
        ...
