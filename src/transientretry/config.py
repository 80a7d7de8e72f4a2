"""Retry settings loaded from TOML with environment overrides."""

from __future__ import annotations

import math
import os
import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from .handlers import COMMAND_MAX_ATTEMPTS, QUERY_MAX_ATTEMPTS
from .logging import LOG_LEVELS, normalize_level
from .retry import DEFAULT_MAX_ATTEMPTS, DEFAULT_WAIT_SECONDS, MIN_ATTEMPTS, RetryPolicy

DEFAULT_CONFIG_PATH = Path("~/.config/transientretry/config.toml").expanduser()
MAX_ATTEMPTS_ENV = "TRANSIENTRETRY_MAX_ATTEMPTS"
WAIT_SECONDS_ENV = "TRANSIENTRETRY_WAIT_SECONDS"
_SECTION = "retry"


class RetrySettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=MIN_ATTEMPTS)
    wait_seconds: float = Field(default=DEFAULT_WAIT_SECONDS, ge=0, allow_inf_nan=False)
    command_max_attempts: int = Field(default=COMMAND_MAX_ATTEMPTS, ge=MIN_ATTEMPTS)
    query_max_attempts: int = Field(default=QUERY_MAX_ATTEMPTS, ge=MIN_ATTEMPTS)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = normalize_level(value)
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return normalized

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(self.max_attempts, self.wait_seconds)

    def command_policy(self) -> RetryPolicy:
        return RetryPolicy(self.command_max_attempts, self.wait_seconds)

    def query_policy(self) -> RetryPolicy:
        return RetryPolicy(self.query_max_attempts, self.wait_seconds)


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _is_attempt_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= MIN_ATTEMPTS


def _is_wait(value: object) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value) and value >= 0


def _env_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _sanitize(raw: dict[str, object]) -> RetrySettings:
    cfg = RetrySettings()

    for name in ("max_attempts", "command_max_attempts", "query_max_attempts"):
        value = raw.get(name)
        if _is_attempt_count(value):
            setattr(cfg, name, value)

    wait_seconds = raw.get("wait_seconds")
    if _is_wait(wait_seconds):
        cfg.wait_seconds = float(wait_seconds)

    log_level = raw.get("log_level")
    if isinstance(log_level, str) and normalize_level(log_level) in LOG_LEVELS:
        cfg.log_level = log_level

    env_attempts = _env_int(MAX_ATTEMPTS_ENV)
    if _is_attempt_count(env_attempts):
        cfg.max_attempts = env_attempts

    env_wait = _env_float(WAIT_SECONDS_ENV)
    if _is_wait(env_wait):
        cfg.wait_seconds = env_wait

    return cfg


def load_settings(path: str | Path | None = None) -> RetrySettings:
    resolved = get_config_path(path)
    raw: object = {}
    if resolved.exists():
        try:
            with resolved.open("rb") as handle:
                raw = tomllib.load(handle)
        except (tomllib.TOMLDecodeError, OSError):
            raw = {}
    section = raw.get(_SECTION, {}) if isinstance(raw, dict) else {}
    if not isinstance(section, dict):
        section = {}
    return _sanitize(section)
