"""
chainguard Configuration

Checkpoint settings are read from environment variables once, at import, and
exposed on the ``Config`` class. Components take these values through their
constructors so tests can pass explicit settings instead of patching globals.

Environment variables:
- CHAINGUARD_CHECKPOINTS: enable checkpoint enforcement (default: 1)
- CHAINGUARD_SIGCHECK_FACTOR: full-verification cost multiplier (default: 5.0)
- CHAINGUARD_CHECKPOINTS_FILE: optional JSON file replacing the built-in table
- CHAINGUARD_LOG_LEVEL: logging level (default: INFO)
- CHAINGUARD_LOG_FILE: optional JSON log file path
"""

from __future__ import annotations

import logging
import os
from typing import Mapping

from chainguard.core.constants import DEFAULT_SIGCHECK_VERIFICATION_FACTOR

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_bool(env_var: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    """Parse a boolean flag, accepting 1/0, true/false, yes/no and on/off."""
    environ = os.environ if environ is None else environ
    raw = environ.get(env_var, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{env_var} must be one of {sorted(_TRUE_VALUES | _FALSE_VALUES)}, got {raw!r}"
    )


def _get_positive_float(
    env_var: str, default: float, environ: Mapping[str, str] | None = None
) -> float:
    """Parse a strictly positive float, falling back to ``default`` when unset."""
    environ = os.environ if environ is None else environ
    raw = environ.get(env_var, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be a number, got {raw!r}") from exc
    # NaN fails this comparison as well
    if not value > 0 or value == float("inf"):
        raise ConfigurationError(f"{env_var} must be a positive finite number, got {raw!r}")
    return value


def _get_log_level(env_var: str, default: str, environ: Mapping[str, str] | None = None) -> str:
    environ = os.environ if environ is None else environ
    level = environ.get(env_var, "").strip().upper() or default
    if level not in _LOG_LEVELS:
        raise ConfigurationError(f"{env_var} must be one of {sorted(_LOG_LEVELS)}, got {level!r}")
    return level


CHECKPOINTS_ENABLED = _get_bool("CHAINGUARD_CHECKPOINTS", True)
SIGCHECK_VERIFICATION_FACTOR = _get_positive_float(
    "CHAINGUARD_SIGCHECK_FACTOR", DEFAULT_SIGCHECK_VERIFICATION_FACTOR
)
CHECKPOINTS_FILE = os.getenv("CHAINGUARD_CHECKPOINTS_FILE", "").strip()
LOG_LEVEL = _get_log_level("CHAINGUARD_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("CHAINGUARD_LOG_FILE", "").strip()

if not CHECKPOINTS_ENABLED:
    logger.warning(
        "Checkpoint enforcement disabled; alternate histories will not be rejected",
        extra={"event": "config.checkpoints_disabled"},
    )


class Config:
    """Process-wide checkpoint settings resolved from the environment."""

    CHECKPOINTS_ENABLED = CHECKPOINTS_ENABLED
    SIGCHECK_VERIFICATION_FACTOR = SIGCHECK_VERIFICATION_FACTOR
    CHECKPOINTS_FILE = CHECKPOINTS_FILE
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE


__all__ = [
    "Config",
    "ConfigurationError",
    "CHECKPOINTS_ENABLED",
    "SIGCHECK_VERIFICATION_FACTOR",
    "CHECKPOINTS_FILE",
    "LOG_LEVEL",
    "LOG_FILE",
]
