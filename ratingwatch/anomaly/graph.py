"""
Interaction graph built from a full scan of the sample log.

Rebuilt from scratch for every batch run; there is no incremental index to keep
in sync because samples are never updated or deleted.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from .schema import Edge, RatingSample
from .statistics import EntityStatistics


class InteractionGraph:
    """
    Adjacency map (source -> outgoing edges) plus per-entity statistics.

    Every sample feeds its rating into both the source's and the target's
    statistics, so an entity's baseline covers ratings it issued and received.
    Edge order within a source follows scan order.
    """

    def __init__(self) -> None:
        self._adjacency: Dict[int, List[Edge]] = {}
        self._stats: Dict[int, EntityStatistics] = {}
        self._edge_count = 0

    @classmethod
    def build(cls, samples: Iterable[RatingSample]) -> "InteractionGraph":
        graph = cls()
        for sample in samples:
            graph.add(sample)
        return graph

    def add(self, sample: RatingSample) -> None:
        edge = Edge(
            target=sample.target,
            rating=sample.rating,
            timestamp=sample.timestamp,
            anomaly=sample.anomaly,
        )
        self._adjacency.setdefault(sample.source, []).append(edge)
        self._stats.setdefault(sample.source, EntityStatistics()).update(sample.rating)
        self._stats.setdefault(sample.target, EntityStatistics()).update(sample.rating)
        self._edge_count += 1

    def sources(self) -> List[int]:
        return list(self._adjacency)

    def entities(self) -> List[int]:
        return sorted(self._stats)

    def edges_from(self, source: int) -> List[Edge]:
        return list(self._adjacency.get(source, []))

    def stats_for(self, entity: int) -> EntityStatistics:
        """Statistics for an entity; an empty accumulator if it never appeared."""
        return self._stats.get(entity, EntityStatistics())

    def __len__(self) -> int:
        return self._edge_count
