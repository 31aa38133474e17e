"""
Unit tests for the SQLAlchemy sample store, run against a SQLite file.
"""

import time

import pytest
from sqlalchemy.dialects import postgresql

from ratingwatch.anomaly.schema import AnomalyMarker
from ratingwatch.core.exceptions import ConfigurationMissing, StorageUnavailable
from ratingwatch.storage.sql import SqlSampleStore, server_epoch


@pytest.fixture
def sql_store(tmp_path):
    ticks = iter(range(1_700_000_000, 1_700_001_000))
    store = SqlSampleStore(f"sqlite:///{tmp_path / 'ratings.db'}", clock=lambda: next(ticks))
    store.ensure_schema()
    yield store
    store.dispose()


def test_append_assigns_id_timestamp_and_marker(sql_store):
    first = sql_store.append(1, 2, 0.5)
    second = sql_store.append(1, 3, -1.25)

    assert (first.id, second.id) == (1, 2)
    assert (first.timestamp, second.timestamp) == (1_700_000_000, 1_700_000_001)
    assert first.anomaly == AnomalyMarker.UNDETERMINED


def test_list_all_round_trips_submitted_values(sql_store):
    submitted = [(1, 2, 0.5), (2, 1, -7.75), (3, 3, 1e9), (-2147483648, 2147483647, 2.0)]
    appended = [sql_store.append(*row) for row in submitted]

    stored = sql_store.query_all()

    assert [(s.source, s.target, s.rating) for s in stored] == submitted
    assert [s.timestamp for s in stored] == [a.timestamp for a in appended]
    assert all(s.anomaly == 0 for s in stored)


def test_query_by_source_returns_issued_ratings_in_order(sql_store):
    sql_store.append(1, 2, 3.0)
    sql_store.append(2, 1, 9.0)
    sql_store.append(1, 4, -1.0)

    assert sql_store.query_by_source(1) == [3.0, -1.0]
    assert sql_store.query_by_source(42) == []


def test_missing_url_is_configuration_error():
    store = SqlSampleStore(None)

    with pytest.raises(ConfigurationMissing):
        store.append(1, 2, 1.0)
    with pytest.raises(ConfigurationMissing):
        store.query_all()


def test_missing_table_is_storage_unavailable(tmp_path):
    store = SqlSampleStore(f"sqlite:///{tmp_path / 'empty.db'}")
    try:
        with pytest.raises(StorageUnavailable):
            store.query_all()
        with pytest.raises(StorageUnavailable):
            store.query_by_source(1)
    finally:
        store.dispose()


def test_unknown_dialect_is_storage_unavailable():
    store = SqlSampleStore("nosuchdialect://localhost/ratings")

    with pytest.raises(StorageUnavailable):
        store.query_all()


def test_database_assigns_timestamp_without_clock(tmp_path):
    store = SqlSampleStore(f"sqlite:///{tmp_path / 'server_clock.db'}")
    store.ensure_schema()
    try:
        before = int(time.time())
        sample = store.append(1, 2, 0.5)
        after = int(time.time())

        assert before - 1 <= sample.timestamp <= after + 1
        assert store.query_all()[0].timestamp == sample.timestamp
    finally:
        store.dispose()


def test_server_epoch_expressions():
    pg = server_epoch("postgresql").compile(dialect=postgresql.dialect())

    assert "extract(epoch from now())" in str(pg).lower()
    assert server_epoch("sqlite") is not None
    assert server_epoch("mssql") is None
