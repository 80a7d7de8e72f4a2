"""Transient fault retry engine for database operations."""

from .classifiers import (
    NETWORK_CONNECTIVITY,
    SQL_TRANSIENT,
    Classification,
    NetworkConnectivityClassifier,
    SqlTransientClassifier,
    TransientClassifier,
)
from .errors import (
    ExitCode,
    InvalidConfigurationError,
    RetryCancelledError,
    RetryLimitExceededError,
    TransientRetryError,
)
from .providers import SqlError, SqlProviderError
from .retry import RetryPolicy, run_with_retry
from .throttling import (
    ResourceType,
    ThrottledResource,
    ThrottlingCondition,
    ThrottlingMode,
    ThrottlingSeverity,
    from_error_message,
    from_reason_code,
)

__all__ = [
    "Classification",
    "ExitCode",
    "from_error_message",
    "from_reason_code",
    "InvalidConfigurationError",
    "NETWORK_CONNECTIVITY",
    "NetworkConnectivityClassifier",
    "ResourceType",
    "RetryCancelledError",
    "RetryLimitExceededError",
    "RetryPolicy",
    "run_with_retry",
    "SQL_TRANSIENT",
    "SqlError",
    "SqlProviderError",
    "SqlTransientClassifier",
    "ThrottledResource",
    "ThrottlingCondition",
    "ThrottlingMode",
    "ThrottlingSeverity",
    "TransientClassifier",
    "TransientRetryError",
]
