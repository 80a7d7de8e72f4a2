"""Decoding of throttling reason codes reported by the database service.

A throttled request fails with error 40501 and a message carrying a packed
reason code, e.g. ``"The service is currently busy. ... Code: 4194304."``.
The two lowest bits hold the throttling mode. After dropping the low byte, the
remaining bits hold 2-bit severity groups, one per resource, in this order:

    PhysicalDatabaseSpace, PhysicalLogSpace, LogWriteDelay, DataReadDelay,
    Cpu, DatabaseSize, Internal, WorkerThreads, Internal

The last group is reported as a second ``Internal`` entry.
"""

from __future__ import annotations

import logging as py_logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .providers import sub_errors

logger = py_logging.getLogger(__name__)

THROTTLING_ERROR_NUMBER = 40501

_REASON_CODE_PATTERN = re.compile(r"Code:\s*(\d+)", re.IGNORECASE)
_MODE_MASK = 0b11
_GROUP_MASK = 0b11
_GROUP_WIDTH = 2
_MODE_SECTION_WIDTH = 8
_MAX_REASON_CODE = 2**31 - 1


class ThrottlingMode(Enum):
    NO_THROTTLING = 0
    REJECT_UPDATE_INSERT = 1
    REJECT_ALL_WRITES = 2
    REJECT_ALL = 3
    UNKNOWN = -1

    def __str__(self) -> str:
        return _MODE_LABELS[self]


class ResourceType(Enum):
    PHYSICAL_DATABASE_SPACE = 0
    PHYSICAL_LOG_SPACE = 1
    LOG_WRITE_DELAY = 2
    DATA_READ_DELAY = 3
    CPU = 4
    DATABASE_SIZE = 5
    INTERNAL = 6
    WORKER_THREADS = 7
    UNKNOWN = -1

    def __str__(self) -> str:
        return _RESOURCE_LABELS[self]


class ThrottlingSeverity(Enum):
    NONE = 0
    SOFT = 1
    HARD = 2
    UNKNOWN = 3

    def __str__(self) -> str:
        return self.name.capitalize()


_MODE_LABELS = {
    ThrottlingMode.NO_THROTTLING: "NoThrottling",
    ThrottlingMode.REJECT_UPDATE_INSERT: "RejectUpdateInsert",
    ThrottlingMode.REJECT_ALL_WRITES: "RejectAllWrites",
    ThrottlingMode.REJECT_ALL: "RejectAll",
    ThrottlingMode.UNKNOWN: "Unknown",
}

_RESOURCE_LABELS = {
    ResourceType.PHYSICAL_DATABASE_SPACE: "PhysicalDatabaseSpace",
    ResourceType.PHYSICAL_LOG_SPACE: "PhysicalLogSpace",
    ResourceType.LOG_WRITE_DELAY: "LogWriteDelay",
    ResourceType.DATA_READ_DELAY: "DataReadDelay",
    ResourceType.CPU: "Cpu",
    ResourceType.DATABASE_SIZE: "DatabaseSize",
    ResourceType.INTERNAL: "Internal",
    ResourceType.WORKER_THREADS: "WorkerThreads",
    ResourceType.UNKNOWN: "Unknown",
}

# Bit order of the severity groups, lowest bits first.
DECODE_ORDER: tuple[ResourceType, ...] = (
    ResourceType.PHYSICAL_DATABASE_SPACE,
    ResourceType.PHYSICAL_LOG_SPACE,
    ResourceType.LOG_WRITE_DELAY,
    ResourceType.DATA_READ_DELAY,
    ResourceType.CPU,
    ResourceType.DATABASE_SIZE,
    ResourceType.INTERNAL,
    ResourceType.WORKER_THREADS,
    ResourceType.INTERNAL,
)

_THROTTLED = (ThrottlingSeverity.SOFT, ThrottlingSeverity.HARD)


@dataclass(frozen=True)
class ThrottledResource:
    resource: ResourceType
    severity: ThrottlingSeverity

    def __str__(self) -> str:
        return f"{self.resource}: {self.severity}"


@dataclass(frozen=True)
class ThrottlingCondition:
    mode: ThrottlingMode
    resources: tuple[ThrottledResource, ...] = field(default_factory=tuple)

    @classmethod
    def unknown(cls) -> ThrottlingCondition:
        return cls(
            mode=ThrottlingMode.UNKNOWN,
            resources=(ThrottledResource(ResourceType.UNKNOWN, ThrottlingSeverity.UNKNOWN),),
        )

    @classmethod
    def from_reason_code(cls, reason_code: int) -> ThrottlingCondition:
        return from_reason_code(reason_code)

    @classmethod
    def from_error_message(cls, message: str | None) -> ThrottlingCondition:
        return from_error_message(message)

    @classmethod
    def from_sql_error(cls, sql_error: Any) -> ThrottlingCondition:
        return from_sql_error(sql_error)

    @classmethod
    def from_provider_error(cls, error: BaseException | None) -> ThrottlingCondition:
        return from_provider_error(error)

    @property
    def is_unknown(self) -> bool:
        return self.mode is ThrottlingMode.UNKNOWN

    def severity_of(self, resource: ResourceType) -> ThrottlingSeverity | None:
        for entry in self.resources:
            if entry.resource is resource:
                return entry.severity
        return None

    def is_throttled_on(self, resource: ResourceType) -> bool:
        return any(
            entry.resource is resource and entry.severity in _THROTTLED
            for entry in self.resources
        )

    @property
    def is_throttled_on_data_space(self) -> bool:
        return self.is_throttled_on(ResourceType.PHYSICAL_DATABASE_SPACE)

    @property
    def is_throttled_on_log_space(self) -> bool:
        return self.is_throttled_on(ResourceType.PHYSICAL_LOG_SPACE)

    @property
    def is_throttled_on_log_write(self) -> bool:
        return self.is_throttled_on(ResourceType.LOG_WRITE_DELAY)

    @property
    def is_throttled_on_data_read(self) -> bool:
        return self.is_throttled_on(ResourceType.DATA_READ_DELAY)

    @property
    def is_throttled_on_cpu(self) -> bool:
        return self.is_throttled_on(ResourceType.CPU)

    @property
    def is_throttled_on_database_size(self) -> bool:
        return self.is_throttled_on(ResourceType.DATABASE_SIZE)

    @property
    def is_throttled_on_worker_threads(self) -> bool:
        return self.is_throttled_on(ResourceType.WORKER_THREADS)

    def __str__(self) -> str:
        """Render ``Mode: <mode> | <resource>: <severity>, ...`` without Internal entries.

        Entries are ordered case-insensitively, so ``DatabaseSize`` sorts
        before ``DataReadDelay``.
        """
        rendered = sorted(
            (str(entry) for entry in self.resources if entry.resource is not ResourceType.INTERNAL),
            key=str.casefold,
        )
        return f"Mode: {self.mode} | " + ", ".join(rendered)


def _decode_groups(group_code: int) -> Iterator[ThrottledResource]:
    for resource in DECODE_ORDER:
        yield ThrottledResource(resource, ThrottlingSeverity(group_code & _GROUP_MASK))
        group_code >>= _GROUP_WIDTH


def from_reason_code(reason_code: int) -> ThrottlingCondition:
    """Decode a packed reason code. Non-positive codes decode to Unknown."""
    try:
        if reason_code <= 0:
            return ThrottlingCondition.unknown()
        mode = ThrottlingMode(reason_code & _MODE_MASK)
        resources = tuple(_decode_groups(reason_code >> _MODE_SECTION_WIDTH))
    except (TypeError, ValueError):
        logger.debug("Unable to decode throttling reason code %r", reason_code, exc_info=True)
        return ThrottlingCondition.unknown()
    return ThrottlingCondition(mode=mode, resources=resources)


def parse_reason_code(message: str | None) -> int | None:
    if not isinstance(message, str):
        return None
    match = _REASON_CODE_PATTERN.search(message)
    if match is None:
        return None
    try:
        reason_code = int(match.group(1))
    except ValueError:
        return None
    if reason_code > _MAX_REASON_CODE:
        return None
    return reason_code


def from_error_message(message: str | None) -> ThrottlingCondition:
    reason_code = parse_reason_code(message)
    if reason_code is None:
        logger.debug("No throttling reason code found in message %r", message)
        return ThrottlingCondition.unknown()
    return from_reason_code(reason_code)


def from_sql_error(sql_error: Any) -> ThrottlingCondition:
    if sql_error is None:
        return ThrottlingCondition.unknown()
    return from_error_message(getattr(sql_error, "message", None))


def from_provider_error(error: BaseException | None) -> ThrottlingCondition:
    """Decode the first throttling sub-error carried by ``error``, if any."""
    for sql_error in sub_errors(error):
        if getattr(sql_error, "number", None) == THROTTLING_ERROR_NUMBER:
            return from_sql_error(sql_error)
    return ThrottlingCondition.unknown()

