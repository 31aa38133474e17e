"""
Batch aggregation engine.

Classifies every stored interaction against statistics computed from the whole
current dataset and reduces the verdicts to corpus-wide counts. This is the
full-corpus counterpart of the incremental ingest path; the two can disagree on
the same edge because they judge it against different baselines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from ratingwatch.core.config import BaselinePolicy

from .classifier import AnomalyClassifier
from .graph import InteractionGraph
from .schema import AggregateStats, EntityReport, RatingSample

logger = logging.getLogger(__name__)


@dataclass
class AggregationEngine:
    """
    Deterministic full-corpus classifier.

    Notes:
    - One graph per run; nothing is cached between runs.
    - normal + anomalous always equals the number of samples scanned.
    """

    classifier: AnomalyClassifier = field(default_factory=AnomalyClassifier)
    policy: BaselinePolicy = BaselinePolicy.SOURCE_ONLY

    def aggregate(self, samples: Iterable[RatingSample]) -> AggregateStats:
        graph = InteractionGraph.build(samples)
        return self.aggregate_graph(graph)

    def aggregate_graph(self, graph: InteractionGraph) -> AggregateStats:
        total = 0
        anomalous = 0

        for source in graph.sources():
            # Every source has folded at least one rating, so its stats are non-empty.
            source_stats = graph.stats_for(source)
            for edge in graph.edges_from(source):
                total += 1
                is_anomaly = self.classifier.classify_edge(
                    edge.rating,
                    source_stats,
                    graph.stats_for(edge.target),
                    self.policy,
                )
                if is_anomaly:
                    anomalous += 1

        normal = total - anomalous
        ratio = anomalous / total if total > 0 else 0.0

        logger.debug(
            "Aggregated %d interactions (%d anomalous, policy=%s)",
            total,
            anomalous,
            self.policy.value,
        )
        return AggregateStats(
            total_interactions=total,
            normal_interactions=normal,
            anomalous_interactions=anomalous,
            anomaly_ratio=ratio,
        )

    def entity_report(self, samples: Iterable[RatingSample]) -> List[EntityReport]:
        """Per-entity baseline statistics, sorted by entity id."""
        graph = InteractionGraph.build(samples)
        reports: List[EntityReport] = []
        for entity in graph.entities():
            stats = graph.stats_for(entity)
            reports.append(
                EntityReport(
                    entity=entity,
                    count=stats.count,
                    mean=stats.mean(),
                    std_dev=stats.std_dev(),
                )
            )
        return reports
