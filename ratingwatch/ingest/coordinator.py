"""
Incremental ingest path.

Persists one new interaction, then classifies it against the issuing source's
history as it stands in the store. The verdict is returned to the caller and
never written back into the stored sample.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ratingwatch.anomaly.classifier import AnomalyClassifier
from ratingwatch.anomaly.graph import InteractionGraph
from ratingwatch.anomaly.schema import NewInteraction, RatingSample
from ratingwatch.anomaly.statistics import EntityStatistics
from ratingwatch.core.config import BaselinePolicy, ScopePolicy
from ratingwatch.storage.base import SampleStore

logger = logging.getLogger(__name__)


@dataclass
class IngestCoordinator:
    """
    Append-then-classify coordinator.

    Scope:
    - INCREMENTAL_HISTORY: baseline is every rating the source has issued,
      including the one just appended. Ratings the source received are ignored.
    - FULL_CORPUS: baseline comes from an interaction graph over the whole log,
      judged under the configured BaselinePolicy.

    The append is never rolled back, whatever happens afterwards.
    """

    store: SampleStore
    classifier: AnomalyClassifier = field(default_factory=AnomalyClassifier)
    scope: ScopePolicy = ScopePolicy.INCREMENTAL_HISTORY
    baseline: BaselinePolicy = BaselinePolicy.SOURCE_ONLY

    def ingest(self, interaction: NewInteraction) -> bool:
        sample = self.store.append(interaction.source, interaction.target, interaction.rating)

        if self.scope is ScopePolicy.FULL_CORPUS:
            is_anomaly = self._classify_full_corpus(sample)
        else:
            is_anomaly = self._classify_incremental(sample)

        logger.info(
            "Ingested rating %s -> %s (%.4f): %s",
            sample.source,
            sample.target,
            sample.rating,
            "anomaly" if is_anomaly else "normal",
        )
        return is_anomaly

    def _classify_incremental(self, sample: RatingSample) -> bool:
        history = self.store.query_by_source(sample.source)
        stats = EntityStatistics.from_ratings(history)
        if stats.is_empty:
            logger.warning("No history visible for source %s after append", sample.source)
        return self.classifier.classify_or_fixed(sample.rating, stats)

    def _classify_full_corpus(self, sample: RatingSample) -> bool:
        graph = InteractionGraph.build(self.store.query_all())
        source_stats = graph.stats_for(sample.source)
        if source_stats.is_empty:
            logger.warning("No corpus entry for source %s after append", sample.source)
            return self.classifier.classify_or_fixed(sample.rating, source_stats)
        return self.classifier.classify_edge(
            sample.rating,
            source_stats,
            graph.stats_for(sample.target),
            self.baseline,
        )
