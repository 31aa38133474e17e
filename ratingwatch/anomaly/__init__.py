"""
Anomaly module: rating statistics, classification, and batch aggregation.

Implements per-entity baselines, the two-threshold classifier, the interaction
graph, and the full-corpus aggregation engine.
"""

from .classifier import AnomalyClassifier
from .engine import AggregationEngine
from .graph import InteractionGraph
from .schema import (
    AggregateStats,
    AnomalyMarker,
    BaselinePolicy,
    Edge,
    EntityReport,
    InteractionDecision,
    NewInteraction,
    RatingSample,
    RemoteVerdict,
    ScopePolicy,
)
from .statistics import EntityStatistics

__all__ = [
	"AggregationEngine",
	"AnomalyClassifier",
	"EntityStatistics",
	"InteractionGraph",
	"AggregateStats",
	"AnomalyMarker",
	"BaselinePolicy",
	"Edge",
	"EntityReport",
	"InteractionDecision",
	"NewInteraction",
	"RatingSample",
	"RemoteVerdict",
	"ScopePolicy",
]
