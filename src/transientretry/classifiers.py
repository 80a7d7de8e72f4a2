"""Transient fault classifiers for database provider errors."""

from __future__ import annotations

import logging as py_logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .providers import sub_errors
from .throttling import THROTTLING_ERROR_NUMBER, ThrottlingCondition, from_sql_error

logger = py_logging.getLogger(__name__)

HOST_NOT_FOUND = 11001

TRANSIENT_ERROR_NUMBERS = frozenset(
    {
        HOST_NOT_FOUND,
        10928,
        10929,
        10053,
        10054,
        10060,
        40197,
        40540,
        40613,
        40143,
        233,
        64,
        20,
    }
)

THROTTLING_MODE_KEY = "ThrottlingMode"
THROTTLING_CONDITION_KEY = "ThrottlingCondition"


@runtime_checkable
class TransientClassifier(Protocol):
    def is_transient(self, error: BaseException | None) -> bool: ...


@dataclass(frozen=True)
class Classification:
    transient: bool
    throttling: ThrottlingCondition | None = None

    def __bool__(self) -> bool:
        return self.transient


NOT_TRANSIENT = Classification(transient=False)
TRANSIENT = Classification(transient=True)


def _annotate(error: BaseException, condition: ThrottlingCondition) -> None:
    data = getattr(error, "data", None)
    if isinstance(data, MutableMapping):
        data[THROTTLING_MODE_KEY] = str(condition.mode)
        data[THROTTLING_CONDITION_KEY] = condition


class SqlTransientClassifier:
    """Treats connection failures, timeouts and throttling as transient."""

    def classify(self, error: BaseException | None) -> Classification:
        for sql_error in sub_errors(error):
            if sql_error.number == THROTTLING_ERROR_NUMBER:
                condition = from_sql_error(sql_error)
                _annotate(error, condition)
                logger.debug("Throttled by provider: %s", condition)
                return Classification(transient=True, throttling=condition)
            if sql_error.number in TRANSIENT_ERROR_NUMBERS:
                return TRANSIENT
        if isinstance(error, TimeoutError):
            return TRANSIENT
        return NOT_TRANSIENT

    def is_transient(self, error: BaseException | None) -> bool:
        return self.classify(error).transient


class NetworkConnectivityClassifier:
    """Only an unreachable host counts as transient."""

    def is_transient(self, error: BaseException | None) -> bool:
        return any(sql_error.number == HOST_NOT_FOUND for sql_error in sub_errors(error))


SQL_TRANSIENT = SqlTransientClassifier()
NETWORK_CONNECTIVITY = NetworkConnectivityClassifier()
