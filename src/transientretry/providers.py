"""Provider error shapes understood by the classifiers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SqlError:
    number: int
    message: str = ""


class SqlProviderError(Exception):
    """Driver failure carrying one or more numbered sub-errors.

    ``data`` is a free-form annotation bag; classifiers record decoded
    throttling details there.
    """

    def __init__(self, message: str = "", errors: Iterable[SqlError] = ()) -> None:
        self.errors: list[SqlError] = list(errors)
        if not message and self.errors:
            message = self.errors[0].message
        super().__init__(message)
        self.message = message
        self.data: dict[str, object] = {}

    @classmethod
    def single(cls, number: int, message: str = "") -> SqlProviderError:
        return cls(message, [SqlError(number, message)])

    @property
    def number(self) -> int:
        return self.errors[0].number if self.errors else 0


def sub_errors(error: object) -> list[Any]:
    """Return the numbered sub-errors of a provider error, or an empty list."""
    if error is None:
        return []
    errors = getattr(error, "errors", None)
    if errors is None or isinstance(errors, (str, bytes, dict)):
        return []
    try:
        items = list(errors)
    except TypeError:
        return []
    return [item for item in items if isinstance(getattr(item, "number", None), int)]
