"""
Public operations of the rating service.

Each operation runs its core work on a dedicated storage executor, captures the
outcome as ``Ok`` or ``Err``, and converts it to the operation's always-populated
response shape in exactly one boundary function. Nothing raised below this
module reaches the transport layer.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Protocol, TypeVar, Union

from ratingwatch.anomaly import (
    AggregateStats,
    AggregationEngine,
    AnomalyClassifier,
    EntityReport,
    InteractionDecision,
    NewInteraction,
    RatingSample,
)
from ratingwatch.core.config import Config, config
from ratingwatch.ingest import IngestCoordinator, RemoteClassifier, RemoteIngestCoordinator
from ratingwatch.storage import InMemorySampleStore, SampleStore, SqlSampleStore

logger = logging.getLogger("backend.service")

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: BaseException


Result = Union[Ok[T], Err]


class Ingestor(Protocol):
    def ingest(self, interaction: NewInteraction) -> bool:
        ...


def capture(fn: Callable[..., T], *args: Any) -> Result:
    """Run ``fn`` and tag its outcome instead of letting it raise."""
    try:
        return Ok(fn(*args))
    except Exception as exc:
        return Err(exc)


def _describe(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


def ingest_response(result: Result) -> InteractionDecision:
    if isinstance(result, Ok):
        is_anomaly = bool(result.value)
        return InteractionDecision(status="Anomaly" if is_anomaly else "Normal", is_anomaly=is_anomaly)
    logger.error("Error processing interaction: %s", _describe(result.error))
    return InteractionDecision(
        status=f"Error processing interaction: {_describe(result.error)}",
        is_anomaly=False,
    )


def aggregate_response(result: Result) -> AggregateStats:
    if isinstance(result, Ok):
        return result.value
    logger.error("Error aggregating interactions: %s", _describe(result.error))
    return AggregateStats.empty()


def list_response(result: Result) -> List[RatingSample]:
    if isinstance(result, Ok):
        return list(result.value)
    logger.error("Error listing interactions: %s", _describe(result.error))
    return []


def entity_stats_response(result: Result) -> List[EntityReport]:
    if isinstance(result, Ok):
        return list(result.value)
    logger.error("Error computing entity statistics: %s", _describe(result.error))
    return []


def build_ingestor(store: SampleStore, settings: Config, classifier: AnomalyClassifier) -> Ingestor:
    """Local statistics by default; the remote delegate when enabled."""
    if settings.remote.enabled:
        remote = RemoteClassifier(url=settings.remote.url, timeout_seconds=settings.remote.timeout_seconds)
        return RemoteIngestCoordinator(store=store, remote=remote)
    return IngestCoordinator(
        store=store,
        classifier=classifier,
        scope=settings.policy.ingest_scope,
        baseline=settings.policy.baseline,
    )


class InteractionService:
    """
    Ingest, Aggregate, ListAll and per-entity statistics.

    The store is injected; blocking calls run on ``executor`` so slow storage
    never occupies the request-accepting thread.
    """

    def __init__(
        self,
        store: SampleStore,
        settings: Optional[Config] = None,
        ingestor: Optional[Ingestor] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.settings = settings or config
        self.store = store
        classifier = AnomalyClassifier(self.settings.thresholds)
        self.engine = AggregationEngine(classifier=classifier, policy=self.settings.policy.baseline)
        self.ingestor = ingestor or build_ingestor(store, self.settings, classifier)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.storage.workers,
            thread_name_prefix="ratingwatch-storage",
        )

    def _run(self, fn: Callable[..., T], *args: Any) -> Result:
        try:
            return self._executor.submit(capture, fn, *args).result()
        except Exception as exc:
            # Executor shut down or worker thread failed before running fn.
            return Err(exc)

    def ingest(self, interaction: NewInteraction) -> InteractionDecision:
        return ingest_response(self._run(self.ingestor.ingest, interaction))

    def aggregate(self) -> AggregateStats:
        return aggregate_response(self._run(self._aggregate))

    def list_all(self) -> List[RatingSample]:
        return list_response(self._run(self.store.query_all))

    def entity_stats(self) -> List[EntityReport]:
        return entity_stats_response(self._run(self._entity_stats))

    def _aggregate(self) -> AggregateStats:
        return self.engine.aggregate(self.store.query_all())

    def _entity_stats(self) -> List[EntityReport]:
        return self.engine.entity_report(self.store.query_all())

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


def create_service(settings: Optional[Config] = None, in_memory: bool = False) -> InteractionService:
    """
    Factory for the service with its configured store.
    """

    settings = settings or config
    if in_memory:
        store: SampleStore = InMemorySampleStore()
    else:
        store = SqlSampleStore(settings.storage.database_url, echo=settings.storage.echo)
    return InteractionService(store=store, settings=settings)
