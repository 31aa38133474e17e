"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, config
from .exceptions import (
    ConfigurationMissing,
    DataValidationError,
    EmptyStatistics,
    RatingWatchError,
    RemoteClassifierFailure,
    StorageUnavailable,
)

__all__ = [
    "Config",
    "config",
    "RatingWatchError",
    "ConfigurationMissing",
    "StorageUnavailable",
    "EmptyStatistics",
    "RemoteClassifierFailure",
    "DataValidationError",
]
