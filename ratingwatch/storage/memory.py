"""
In-process sample store.

Backs tests and the ``--in-memory`` server mode. Not durable.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional

from ratingwatch.anomaly.schema import AnomalyMarker, RatingSample
from ratingwatch.core.exceptions import StorageUnavailable


class InMemorySampleStore:
    """
    List-backed log guarded by a lock.

    Set ``fail_with`` to an exception to make every call raise it, which
    simulates an unreachable store.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._samples: List[RatingSample] = []
        self.fail_with: Optional[Exception] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def append(self, source: int, target: int, rating: float) -> RatingSample:
        self._check()
        with self._lock:
            sample = RatingSample(
                id=len(self._samples) + 1,
                source=source,
                target=target,
                rating=float(rating),
                timestamp=int(self._clock()),
                anomaly=int(AnomalyMarker.UNDETERMINED),
            )
            self._samples.append(sample)
        return sample

    def query_by_source(self, source: int) -> List[float]:
        self._check()
        with self._lock:
            return [s.rating for s in self._samples if s.source == source]

    def query_all(self) -> List[RatingSample]:
        self._check()
        with self._lock:
            return list(self._samples)

    def make_unavailable(self, reason: str = "sample store unavailable") -> None:
        self.fail_with = StorageUnavailable(reason)

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
