"""
Remote classification delegate for the ingest path.

An external inference service can replace the local statistics and classifier.
Its answer is treated as an opaque decision; failures surface as
RemoteClassifierFailure and are handled by the same soft-fail boundary as local
classification errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import ValidationError

from ratingwatch.anomaly.schema import NewInteraction, RemoteVerdict
from ratingwatch.core.exceptions import ConfigurationMissing, RemoteClassifierFailure
from ratingwatch.storage.base import SampleStore

logger = logging.getLogger(__name__)


@dataclass
class RemoteClassifier:
    """
    HTTP client for ``POST {url}`` with ``{source, target, rating}``.

    Expects a JSON body with predicted_rating, error_margin and is_anomaly.
    Pass ``client`` to reuse a connection pool (or a mock transport in tests).
    """

    url: Optional[str]
    timeout_seconds: float = 5.0
    client: Optional[httpx.Client] = None

    def classify(self, source: int, target: int, rating: float) -> RemoteVerdict:
        if not self.url:
            raise ConfigurationMissing("Remote classifier URL is not set")
        payload = {"source": source, "target": target, "rating": rating}
        try:
            if self.client is not None:
                resp = self.client.post(self.url, json=payload, timeout=self.timeout_seconds)
            else:
                with httpx.Client(timeout=self.timeout_seconds) as client:
                    resp = client.post(self.url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise RemoteClassifierFailure(
                f"Remote classifier returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteClassifierFailure(f"Remote classifier unreachable: {exc}") from exc
        except ValueError as exc:
            raise RemoteClassifierFailure("Remote classifier returned invalid JSON") from exc

        try:
            return RemoteVerdict.model_validate(data)
        except ValidationError as exc:
            raise RemoteClassifierFailure(f"Remote classifier returned an invalid verdict: {exc}") from exc


@dataclass
class RemoteIngestCoordinator:
    """
    Append-then-delegate coordinator.

    The sample is persisted before the remote call, so a remote failure never
    loses the interaction.
    """

    store: SampleStore
    remote: RemoteClassifier

    def ingest(self, interaction: NewInteraction) -> bool:
        sample = self.store.append(interaction.source, interaction.target, interaction.rating)
        verdict = self.remote.classify(sample.source, sample.target, sample.rating)
        logger.info(
            "Remote verdict for %s -> %s (%.4f): predicted=%.4f margin=%.4f anomaly=%s",
            sample.source,
            sample.target,
            sample.rating,
            verdict.predicted_rating,
            verdict.error_margin,
            verdict.is_anomaly,
        )
        return verdict.is_anomaly
