"""Failure kinds raised by the retry engine and its exit code contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    RETRY_EXHAUSTED = 5
    CANCELLED = 6


@dataclass
class TransientRetryError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class InvalidConfigurationError(TransientRetryError, ValueError):
    """Policy or settings rejected at construction time. Never retried."""

    code: ExitCode = ExitCode.CONFIG_ERROR


@dataclass
class RetryLimitExceededError(TransientRetryError):
    """Every attempt failed transiently and the attempt budget ran out.

    ``history`` holds the transient failures in the order they happened,
    most recent last.
    """

    code: ExitCode = ExitCode.RETRY_EXHAUSTED
    history: tuple[BaseException, ...] = field(default_factory=tuple)

    @property
    def attempts(self) -> int:
        return len(self.history)

    @property
    def last_error(self) -> BaseException | None:
        return self.history[-1] if self.history else None

    @property
    def exceptions(self) -> tuple[BaseException, ...]:
        return (*self.history, self)


@dataclass
class RetryCancelledError(TransientRetryError):
    """Execution stopped through a cancellation event before it finished."""

    code: ExitCode = ExitCode.CANCELLED
    history: tuple[BaseException, ...] = field(default_factory=tuple)


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
