"""
Storage module: the append-only sample log behind the engine.
"""

from .base import SampleStore
from .memory import InMemorySampleStore
from .sql import SqlSampleStore, ratings_table

__all__ = [
    "SampleStore",
    "InMemorySampleStore",
    "SqlSampleStore",
    "ratings_table",
]
