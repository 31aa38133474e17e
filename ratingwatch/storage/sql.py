"""
SQLAlchemy-backed sample store.

Uses the configured database URL (PostgreSQL in production, SQLite in tests).
The engine is created lazily so a missing URL surfaces per call as
ConfigurationMissing instead of preventing the server from starting.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional, Union

from sqlalchemy import (
    BigInteger,
    Column,
    Float,
    Integer,
    MetaData,
    SmallInteger,
    Table,
    cast,
    create_engine,
    extract,
    func,
    insert,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from ratingwatch.anomaly.schema import AnomalyMarker, RatingSample
from ratingwatch.core.exceptions import ConfigurationMissing, StorageUnavailable

logger = logging.getLogger(__name__)

metadata = MetaData()


def server_epoch(dialect_name: str) -> Optional[ColumnElement]:
    """SQL expression for the current epoch second, or None if the dialect has none here."""
    if dialect_name == "postgresql":
        return cast(extract("epoch", func.now()), BigInteger)
    if dialect_name == "sqlite":
        return cast(func.strftime("%s", "now"), BigInteger)
    return None


ratings_table = Table(
    "ratings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source", Integer, nullable=False, index=True),
    Column("target", Integer, nullable=False),
    Column("rating", Float, nullable=False),
    Column("timestamp", BigInteger, nullable=False),  # Unix seconds
    Column("anomaly", SmallInteger, nullable=False, default=0),
)


class SqlSampleStore:
    """
    Append-only ``ratings`` table accessed through SQLAlchemy Core.

    The timestamp is assigned by the database (epoch seconds of NOW()) on
    PostgreSQL and SQLite; other dialects, or an explicit ``clock``, use the
    process clock.

    Every SQLAlchemy or driver error is re-raised as StorageUnavailable.
    """

    def __init__(
        self,
        database_url: Optional[str],
        echo: bool = False,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.database_url = database_url
        self.echo = echo
        self._clock = clock
        self._engine: Optional[Engine] = None
        self._engine_lock = threading.Lock()

    def _get_engine(self) -> Engine:
        if not self.database_url:
            raise ConfigurationMissing("DATABASE_URL is not set")
        with self._engine_lock:
            if self._engine is None:
                try:
                    self._engine = create_engine(
                        self.database_url,
                        echo=self.echo,
                        pool_pre_ping=True,
                    )
                except (SQLAlchemyError, ImportError) as exc:
                    raise StorageUnavailable(f"Could not create database engine: {exc}") from exc
            return self._engine

    def ensure_schema(self) -> None:
        """Create the ratings table if it does not exist."""
        engine = self._get_engine()
        try:
            metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Could not create ratings table: {exc}") from exc

    def _timestamp_value(self, engine: Engine) -> Union[int, ColumnElement]:
        if self._clock is not None:
            return int(self._clock())
        expr = server_epoch(engine.dialect.name)
        return expr if expr is not None else int(time.time())

    def append(self, source: int, target: int, rating: float) -> RatingSample:
        engine = self._get_engine()
        timestamp = self._timestamp_value(engine)
        marker = int(AnomalyMarker.UNDETERMINED)
        stmt = insert(ratings_table).values(
            source=source,
            target=target,
            rating=float(rating),
            timestamp=timestamp,
            anomaly=marker,
        )
        try:
            with engine.begin() as conn:
                result = conn.execute(stmt)
                sample_id = result.inserted_primary_key[0]
                if not isinstance(timestamp, int):
                    timestamp = conn.execute(
                        select(ratings_table.c.timestamp).where(ratings_table.c.id == sample_id)
                    ).scalar_one()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Insert failed: {exc}") from exc

        logger.debug("Appended rating %s -> %s (%s) as id=%s", source, target, rating, sample_id)
        return RatingSample(
            id=sample_id,
            source=source,
            target=target,
            rating=float(rating),
            timestamp=int(timestamp),
            anomaly=marker,
        )

    def query_by_source(self, source: int) -> List[float]:
        engine = self._get_engine()
        stmt = (
            select(ratings_table.c.rating)
            .where(ratings_table.c.source == source)
            .order_by(ratings_table.c.id)
        )
        try:
            with engine.connect() as conn:
                return [float(row.rating) for row in conn.execute(stmt)]
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Query by source failed: {exc}") from exc

    def query_all(self) -> List[RatingSample]:
        engine = self._get_engine()
        stmt = select(ratings_table).order_by(ratings_table.c.id)
        try:
            with engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Query failed: {exc}") from exc
        return [
            RatingSample(
                id=row["id"],
                source=row["source"],
                target=row["target"],
                rating=float(row["rating"]),
                timestamp=int(row["timestamp"]),
                anomaly=int(row["anomaly"]),
            )
            for row in rows
        ]

    def dispose(self) -> None:
        with self._engine_lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
