"""
Pytest configuration and shared fixtures.

Provides test configuration, an in-memory sample store with a fixed clock, and
a classifier with default thresholds.
"""

from typing import Iterator

import pytest

from backend.service import InteractionService
from ratingwatch.anomaly.classifier import AnomalyClassifier
from ratingwatch.core.config import Config
from ratingwatch.storage.memory import InMemorySampleStore

FIXED_NOW = 1_700_000_000


@pytest.fixture
def test_config(tmp_path) -> Config:
    """
    Configuration independent of the environment and any .env file.

    Logs go to a temporary directory so tests never write into the repo.
    """
    return Config(_env_file=None, logs_dir=tmp_path / "logs", log_level="WARNING")


@pytest.fixture
def store() -> InMemorySampleStore:
    """In-memory store whose clock always reads FIXED_NOW."""
    return InMemorySampleStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def classifier() -> AnomalyClassifier:
    return AnomalyClassifier()


@pytest.fixture
def service(store, test_config) -> Iterator[InteractionService]:
    svc = InteractionService(store=store, settings=test_config)
    yield svc
    svc.shutdown()


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
