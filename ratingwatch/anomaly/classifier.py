"""
Rating anomaly classifier.

Implements an explainable two-threshold policy:
- Dynamic threshold: |rating - mean| > threshold_multiple * std_dev
- Fixed threshold: |rating| > fixed_threshold when the baseline has no spread
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ratingwatch.core.config import AnomalyThresholds, BaselinePolicy

from .statistics import EntityStatistics


@dataclass
class AnomalyClassifier:
    """
    Deterministic, side-effect free classifier.

    Callers must only pass statistics with count > 0; an empty baseline raises
    EmptyStatistics rather than producing a verdict.
    """

    thresholds: AnomalyThresholds = field(default_factory=AnomalyThresholds)

    def classify(self, rating: float, stats: EntityStatistics) -> bool:
        std = stats.std_dev()
        if std == 0.0:
            return abs(rating) > self.thresholds.fixed_threshold
        return abs(rating - stats.mean()) > self.thresholds.threshold_multiple * std

    def classify_edge(
        self,
        rating: float,
        source_stats: EntityStatistics,
        target_stats: Optional[EntityStatistics] = None,
        policy: BaselinePolicy = BaselinePolicy.SOURCE_ONLY,
    ) -> bool:
        """
        Classify an edge under a baseline policy.

        SOURCE_AND_TARGET flags the edge when either endpoint's baseline does.
        """
        verdict = self.classify(rating, source_stats)
        if policy is BaselinePolicy.SOURCE_AND_TARGET and target_stats is not None and not target_stats.is_empty:
            verdict = verdict or self.classify(rating, target_stats)
        return verdict

    def classify_or_fixed(self, rating: float, stats: EntityStatistics) -> bool:
        """Classify, judging by magnitude alone when the baseline is empty."""
        if stats.is_empty:
            return abs(rating) > self.thresholds.fixed_threshold
        return self.classify(rating, stats)
