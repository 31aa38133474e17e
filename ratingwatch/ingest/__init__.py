"""
Ingest module: the single-record path from new interaction to verdict.
"""

from .coordinator import IngestCoordinator
from .remote import RemoteClassifier, RemoteIngestCoordinator

__all__ = [
    "IngestCoordinator",
    "RemoteClassifier",
    "RemoteIngestCoordinator",
]
