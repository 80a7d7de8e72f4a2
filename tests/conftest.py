from __future__ import annotations

from pathlib import Path

import pytest


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "property" in path.parts:
            item.add_marker(pytest.mark.property)


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


class AlwaysTransient:
    def is_transient(self, error: BaseException | None) -> bool:
        return True


class NeverTransient:
    def is_transient(self, error: BaseException | None) -> bool:
        return False


class RecordingClassifier:
    """Delegates to ``inner`` and keeps every error it was asked about."""

    def __init__(self, inner) -> None:
        self.inner = inner
        self.seen: list[BaseException | None] = []

    def is_transient(self, error: BaseException | None) -> bool:
        self.seen.append(error)
        return self.inner.is_transient(error)


@pytest.fixture
def always_transient() -> AlwaysTransient:
    return AlwaysTransient()


@pytest.fixture
def never_transient() -> NeverTransient:
    return NeverTransient()


@pytest.fixture
def recording_classifier():
    return RecordingClassifier
