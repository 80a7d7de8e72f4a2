"""Retrying wrappers for command and query handlers."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Generic, Protocol, TypeVar

from .classifiers import SQL_TRANSIENT, TransientClassifier
from .retry import DEFAULT_WAIT_SECONDS, RetryPolicy

T = TypeVar("T")
C = TypeVar("C", contravariant=True)
Q = TypeVar("Q", contravariant=True)
R = TypeVar("R", covariant=True)

COMMAND_MAX_ATTEMPTS = 5
QUERY_MAX_ATTEMPTS = 6


class CommandHandler(Protocol[C]):
    def handle(self, command: C) -> None: ...


class QueryHandler(Protocol[Q, R]):
    def read(self, query: Q) -> R: ...


def transient_retry(
    classifier: TransientClassifier = SQL_TRANSIENT,
    *,
    max_attempts: int = QUERY_MAX_ATTEMPTS,
    wait_seconds: float = DEFAULT_WAIT_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorate a function so each call runs under a fresh retry policy."""
    policy = RetryPolicy(max_attempts=max_attempts, wait_seconds=wait_seconds)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: object, **kwargs: object) -> T:
            return policy.execute_function(
                functools.partial(func, *args, **kwargs),
                classifier,
                sleep=sleep,
            )

        wrapper.retry_policy = policy  # type: ignore[attr-defined]
        return wrapper

    return decorator


class TransientCommandHandler(Generic[C]):
    def __init__(
        self,
        decorated: CommandHandler[C],
        *,
        policy: RetryPolicy | None = None,
        classifier: TransientClassifier = SQL_TRANSIENT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.decorated = decorated
        self.policy = policy or RetryPolicy(COMMAND_MAX_ATTEMPTS, DEFAULT_WAIT_SECONDS)
        self.classifier = classifier
        self._sleep = sleep

    def handle(self, command: C) -> None:
        self.policy.execute_action(
            lambda: self.decorated.handle(command),
            self.classifier,
            sleep=self._sleep,
        )


class TransientQueryHandler(Generic[Q, R]):
    def __init__(
        self,
        decorated: QueryHandler[Q, R],
        *,
        policy: RetryPolicy | None = None,
        classifier: TransientClassifier = SQL_TRANSIENT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.decorated = decorated
        self.policy = policy or RetryPolicy(QUERY_MAX_ATTEMPTS, DEFAULT_WAIT_SECONDS)
        self.classifier = classifier
        self._sleep = sleep

    def read(self, query: Q) -> R:
        return self.policy.execute_function(
            lambda: self.decorated.read(query),
            self.classifier,
            sleep=self._sleep,
        )
