"""Runtime configuration resolved from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_SLEEP_ENV = "WEFT_RELAX_SLEEP_MS"
_PRERELAX_ENV = "WEFT_PRERELAX_BUDGET_MS"
_STOP_TIMEOUT_ENV = "WEFT_STOP_TIMEOUT_MS"
_CHECK_INVARIANTS_ENV = "WEFT_CHECK_INVARIANTS"
_LOG_LEVEL_ENV = "WEFT_LOG_LEVEL"

DEFAULT_SLEEP_MS = 100.0
DEFAULT_PRERELAX_MS = 500.0
DEFAULT_STOP_TIMEOUT_MS = 1000.0

LOGGER = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in {"", "0", "false", "no"}:
        return False
    if raw in {"1", "true", "yes"}:
        return True
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning("Ignoring %s=%r (not a number); using %s.", name, raw, default)
        return default
    if value < 0:
        LOGGER.warning("Ignoring %s=%r (negative); using %s.", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class RelaxerSettings:
    """Timings used by a Relaxer, all in seconds."""

    sleep_time: float = DEFAULT_SLEEP_MS / 1000.0
    prerelax_budget: float = DEFAULT_PRERELAX_MS / 1000.0
    stop_timeout: float = DEFAULT_STOP_TIMEOUT_MS / 1000.0


def resolve_relaxer_settings() -> RelaxerSettings:
    """Resolve relaxer timings from ``WEFT_*`` variables, falling back to defaults."""

    settings = RelaxerSettings(
        sleep_time=_env_float(_SLEEP_ENV, DEFAULT_SLEEP_MS) / 1000.0,
        prerelax_budget=_env_float(_PRERELAX_ENV, DEFAULT_PRERELAX_MS) / 1000.0,
        stop_timeout=_env_float(_STOP_TIMEOUT_ENV, DEFAULT_STOP_TIMEOUT_MS) / 1000.0,
    )
    LOGGER.debug(
        "resolve_relaxer_settings sleep=%s prerelax=%s stop_timeout=%s",
        settings.sleep_time,
        settings.prerelax_budget,
        settings.stop_timeout,
    )
    return settings


def invariant_checks_enabled() -> bool:
    return _env_bool(_CHECK_INVARIANTS_ENV)


def resolve_log_level(preferred: str | None = None) -> int:
    name = (preferred or os.getenv(_LOG_LEVEL_ENV) or "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{name}'.")
    return level


__all__ = [
    "RelaxerSettings",
    "resolve_relaxer_settings",
    "invariant_checks_enabled",
    "resolve_log_level",
    "_SLEEP_ENV",
    "_PRERELAX_ENV",
    "_STOP_TIMEOUT_ENV",
    "_CHECK_INVARIANTS_ENV",
    "_LOG_LEVEL_ENV",
]
