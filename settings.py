from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional

from models.errors import ConfigurationError


_BUCKET_NAME_ENV = "WEATHER_DATA_BUCKET_NAME"
_QUEUE_URL_ENV = "WEATHER_DATA_SQS_QUEUE_URL"
_API_ENDPOINT_ENV = "WEATHER_API_ENDPOINT"
_API_KEY_ENV = "WEATHER_API_KEY"
_ERROR_POLICY_ENV = "INGESTION_ERROR_POLICY"
_DELAY_SECONDS_ENV = "SQS_DELAY_SECONDS"
_API_TIMEOUT_ENV = "WEATHER_API_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_LOCAL_ROOT_ENV = "WEATHER_DATA_LOCAL_ROOT"

# SQS rejects longer delivery delays.
_MAX_DELAY_SECONDS = 900


class ErrorPolicy(str, Enum):
    """How the ingestion pipeline reacts to a failed row or file."""

    CONTINUE = "continue"
    ABORT = "abort"


@dataclass(frozen=True)
class IngestionSettings:
    bucket_name: str
    queue_url: str
    error_policy: ErrorPolicy
    delay_seconds: int
    local_root: Optional[str] = None


@dataclass(frozen=True)
class EnrichmentSettings:
    api_endpoint: str
    api_key: str
    request_timeout: float


def _read_optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _require_env(*names: str) -> dict[str, str]:
    values: dict[str, str] = {}
    missing: list[str] = []
    for name in names:
        value = _read_optional_env(name)
        if value is None:
            missing.append(name)
        else:
            values[name] = value
    if missing:
        raise ConfigurationError(f"{', '.join(missing)} not configured")
    return values


def _read_int(name: str, default: int, maximum: Optional[int] = None) -> int:
    candidate = _read_optional_env(name)
    if candidate is None:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    if parsed < 0 or (maximum is not None and parsed > maximum):
        return default
    return parsed


def _read_float(name: str, default: float) -> float:
    candidate = _read_optional_env(name)
    if candidate is None:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_error_policy(default: ErrorPolicy) -> ErrorPolicy:
    candidate = _read_optional_env(_ERROR_POLICY_ENV)
    if candidate is None:
        return default
    try:
        return ErrorPolicy(candidate.lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in ErrorPolicy)
        raise ConfigurationError(
            f"{_ERROR_POLICY_ENV} must be one of: {allowed} (got {candidate!r})"
        ) from exc


def read_log_level(default: str = "INFO") -> str:
    candidate = _read_optional_env(_LOG_LEVEL_ENV)
    if candidate is None:
        return default
    return candidate.upper()


@lru_cache
def get_ingestion_settings() -> IngestionSettings:
    required = _require_env(_BUCKET_NAME_ENV, _QUEUE_URL_ENV)
    return IngestionSettings(
        bucket_name=required[_BUCKET_NAME_ENV],
        queue_url=required[_QUEUE_URL_ENV],
        error_policy=_read_error_policy(ErrorPolicy.CONTINUE),
        delay_seconds=_read_int(_DELAY_SECONDS_ENV, 10, maximum=_MAX_DELAY_SECONDS),
        local_root=_read_optional_env(_LOCAL_ROOT_ENV),
    )


@lru_cache
def get_enrichment_settings() -> EnrichmentSettings:
    required = _require_env(_API_ENDPOINT_ENV, _API_KEY_ENV)
    return EnrichmentSettings(
        api_endpoint=required[_API_ENDPOINT_ENV],
        api_key=required[_API_KEY_ENV],
        request_timeout=_read_float(_API_TIMEOUT_ENV, 20.0),
    )
