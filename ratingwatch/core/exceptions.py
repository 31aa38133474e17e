"""
Custom exceptions for ratingwatch.

Every public operation converts these into its soft-fail response shape; the
message of each exception is the diagnostic text surfaced to callers.
"""


class RatingWatchError(Exception):
    """Base exception for all ratingwatch failures."""
    pass


class ConfigurationMissing(RatingWatchError):
    """Raised when required configuration (e.g. the storage address) is unset."""
    pass


class StorageUnavailable(RatingWatchError):
    """Raised when the sample store cannot be reached, queried, or written."""
    pass


class EmptyStatistics(RatingWatchError):
    """Raised when mean or std_dev is requested from statistics with no samples."""
    pass


class RemoteClassifierFailure(RatingWatchError):
    """Raised when the remote classification delegate is unreachable or answers non-2xx."""
    pass


class DataValidationError(RatingWatchError):
    """Raised when an inbound interaction payload fails validation."""
    pass
