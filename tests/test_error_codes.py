from __future__ import annotations

from transientretry.errors import (
    ExitCode,
    InvalidConfigurationError,
    RetryCancelledError,
    RetryLimitExceededError,
    TransientRetryError,
    user_facing_error,
)


def test_exit_codes_are_deterministic() -> None:
    assert int(ExitCode.SUCCESS) == 0
    assert int(ExitCode.INVALID_ARGS) == 2
    assert int(ExitCode.CONFIG_ERROR) == 3
    assert int(ExitCode.RUNTIME_ERROR) == 4
    assert int(ExitCode.RETRY_EXHAUSTED) == 5
    assert int(ExitCode.CANCELLED) == 6


def test_error_string_contains_hint() -> None:
    err = TransientRetryError("retry failed", hint="Check the database")
    assert str(err) == "retry failed Hint: Check the database"


def test_error_string_without_hint() -> None:
    assert str(TransientRetryError("msg")) == "msg"


def test_failure_kinds_are_distinct() -> None:
    exhausted = RetryLimitExceededError("limit")
    cancelled = RetryCancelledError("stop")
    invalid = InvalidConfigurationError("bad")

    assert exhausted.code == ExitCode.RETRY_EXHAUSTED
    assert cancelled.code == ExitCode.CANCELLED
    assert invalid.code == ExitCode.CONFIG_ERROR
    assert isinstance(invalid, ValueError)
    assert not isinstance(exhausted, ValueError)
    assert not isinstance(cancelled, RetryLimitExceededError)


def test_limit_exceeded_without_history() -> None:
    err = RetryLimitExceededError("limit")
    assert err.attempts == 0
    assert err.last_error is None
    assert err.exceptions == (err,)


def test_user_facing_error_template() -> None:
    assert user_facing_error("something went wrong") == "Error: something went wrong."
    assert (
        user_facing_error("something went wrong", hint="try again")
        == "Error: something went wrong. Next step: try again"
    )
