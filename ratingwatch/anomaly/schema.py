"""
Schema definitions for rating interactions and classification results.

All records are pydantic models so that storage rows, HTTP payloads, and engine
outputs share one validated shape. Entity identifiers live in the signed 32-bit
integer domain; ratings are unbounded signed floats.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ratingwatch.core.config import BaselinePolicy, ScopePolicy

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class AnomalyMarker(IntEnum):
    """
    Stored per-sample marker.

    Only UNDETERMINED is ever written. The stored marker is an audit placeholder
    and is never updated from a computed verdict.
    """

    UNDETERMINED = 0
    NORMAL = 1
    ANOMALOUS = 2


class NewInteraction(BaseModel):
    """Inbound interaction as submitted by a caller (no id, no timestamp, finite rating)."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    source: int = Field(ge=INT32_MIN, le=INT32_MAX)
    target: int = Field(ge=INT32_MIN, le=INT32_MAX)
    rating: float


class RatingSample(BaseModel):
    """
    One persisted interaction record.

    Fields:
    - id: store-assigned identifier (None before persistence)
    - source/target: entity identifiers; self-loops are allowed
    - rating: signed score, any magnitude
    - timestamp: epoch seconds assigned by the store at write time
    - anomaly: stored marker, always UNDETERMINED at creation
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    source: int = Field(ge=INT32_MIN, le=INT32_MAX)
    target: int = Field(ge=INT32_MIN, le=INT32_MAX)
    rating: float
    timestamp: int
    anomaly: int = int(AnomalyMarker.UNDETERMINED)


class Edge(BaseModel):
    """Outgoing edge in the interaction graph, keyed externally by source."""

    model_config = ConfigDict(frozen=True)

    target: int
    rating: float
    timestamp: int
    anomaly: int = int(AnomalyMarker.UNDETERMINED)


class InteractionDecision(BaseModel):
    """Response of the ingest operation. Always populated, even on failure."""

    status: str
    is_anomaly: bool = False


class AggregateStats(BaseModel):
    """Corpus-wide classification counts. Always populated, even on failure."""

    total_interactions: int = Field(0, ge=0)
    normal_interactions: int = Field(0, ge=0)
    anomalous_interactions: int = Field(0, ge=0)
    anomaly_ratio: float = Field(0.0, ge=0.0, le=1.0)

    @classmethod
    def empty(cls) -> "AggregateStats":
        return cls(
            total_interactions=0,
            normal_interactions=0,
            anomalous_interactions=0,
            anomaly_ratio=0.0,
        )


class EntityReport(BaseModel):
    """
    Per-entity trust statistics over the full corpus.

    Ratings issued and received both count toward an entity's baseline.
    """

    entity: int
    count: int
    mean: float
    std_dev: float


class RemoteVerdict(BaseModel):
    """Decision returned by the remote classification delegate."""

    predicted_rating: float
    error_margin: float
    is_anomaly: bool


__all__ = [
    "AnomalyMarker",
    "BaselinePolicy",
    "ScopePolicy",
    "NewInteraction",
    "RatingSample",
    "Edge",
    "InteractionDecision",
    "AggregateStats",
    "EntityReport",
    "RemoteVerdict",
]
