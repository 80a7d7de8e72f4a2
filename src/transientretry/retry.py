"""Bounded retry of operations that fail with transient faults."""

from __future__ import annotations

import logging as py_logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import TypeVar

from .classifiers import TransientClassifier
from .errors import InvalidConfigurationError, RetryCancelledError, RetryLimitExceededError

T = TypeVar("T")

logger = py_logging.getLogger(__name__)

MIN_ATTEMPTS = 2
DEFAULT_MAX_ATTEMPTS = 6
DEFAULT_WAIT_SECONDS = 1.0


def _to_seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration: how many transient failures to absorb and how long to wait.

    ``max_attempts`` counts failures classified as transient. The wait between
    attempts is constant. A policy holds no per-call state, so a single
    instance can be shared between threads.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    wait_seconds: float = DEFAULT_WAIT_SECONDS

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise InvalidConfigurationError(
                "The number of retries must be an integer.",
                hint=f"Got {self.max_attempts!r}.",
            )
        if self.max_attempts < MIN_ATTEMPTS:
            raise InvalidConfigurationError(
                f"The number of retries cannot be less than {MIN_ATTEMPTS}.",
                hint=f"Got max_attempts={self.max_attempts}.",
            )
        try:
            seconds = _to_seconds(self.wait_seconds)
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(
                "The retry wait interval must be a number of seconds.",
                hint=f"Got {self.wait_seconds!r}.",
            ) from exc
        if not math.isfinite(seconds):
            raise InvalidConfigurationError(
                "The retry wait interval must be a finite number of seconds.",
                hint=f"Got wait_seconds={seconds}.",
            )
        if seconds < 0:
            raise InvalidConfigurationError(
                "The retry wait interval cannot be negative.",
                hint=f"Got wait_seconds={seconds}.",
            )
        object.__setattr__(self, "wait_seconds", seconds)

    @classmethod
    def create(
        cls,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        wait_seconds: float | timedelta = DEFAULT_WAIT_SECONDS,
    ) -> RetryPolicy:
        return cls(max_attempts=max_attempts, wait_seconds=wait_seconds)

    @property
    def wait_interval(self) -> timedelta:
        return timedelta(seconds=self.wait_seconds)

    def execute_action(
        self,
        action: Callable[[], object],
        classifier: TransientClassifier,
        *,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
    ) -> None:
        run_with_retry(
            action,
            policy=self,
            classifier=classifier,
            sleep=sleep,
            cancel_event=cancel_event,
        )

    def execute_function(
        self,
        function: Callable[[], T],
        classifier: TransientClassifier,
        *,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
    ) -> T:
        return run_with_retry(
            function,
            policy=self,
            classifier=classifier,
            sleep=sleep,
            cancel_event=cancel_event,
        )


def _operation_name(operation: Callable[..., object]) -> str:
    return getattr(operation, "__qualname__", None) or repr(operation)


def _check_cancelled(
    cancel_event: threading.Event | None,
    history: list[BaseException],
    name: str,
) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Retry of %s cancelled after %s failed attempts", name, len(history))
        raise RetryCancelledError(
            "The operation was cancelled before it completed.",
            history=tuple(history),
        )


def run_with_retry(
    operation: Callable[[], T],
    *,
    policy: RetryPolicy,
    classifier: TransientClassifier,
    sleep: Callable[[float], None] = time.sleep,
    cancel_event: threading.Event | None = None,
) -> T:
    """Invoke ``operation`` until it succeeds, fails permanently, or the budget runs out.

    Non-transient failures are re-raised as-is without consuming an attempt.
    Transient failures are collected; once ``policy.max_attempts`` of them have
    been seen, :class:`RetryLimitExceededError` is raised carrying all of them.
    """
    name = _operation_name(operation)
    history: list[BaseException] = []

    while True:
        _check_cancelled(cancel_event, history, name)
        try:
            return operation()
        except Exception as exc:
            if not classifier.is_transient(exc):
                logger.debug("Non-transient failure in %s: %r", name, exc)
                raise
            history.append(exc)

        attempt = len(history)
        if attempt >= policy.max_attempts:
            logger.error(
                "Retry limit %s reached for %s; last error: %r",
                policy.max_attempts,
                name,
                history[-1],
            )
            raise RetryLimitExceededError(
                f"Operation retry limit '{policy.max_attempts}' exceeded.",
                hint="The retries limit has been reached.",
                history=tuple(history),
            ) from history[-1]

        logger.warning(
            "Transient failure %s/%s in %s: %r; retrying in %.3fs",
            attempt,
            policy.max_attempts,
            name,
            history[-1],
            policy.wait_seconds,
        )
        if cancel_event is not None:
            cancel_event.wait(policy.wait_seconds)
        else:
            sleep(policy.wait_seconds)
