"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from gwpolicy.models.config import GWPolicyConfig, LogConfig, ResolutionConfig, ResolutionMode


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"GWPOLICY_{key}", default)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    valid = {"json", "console"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log format: {value}. Must be one of {valid}")
    return value.lower()


def _validate_resolution_mode(value: str) -> ResolutionMode:
    try:
        return ResolutionMode(value.lower())
    except ValueError:
        valid = {m.value for m in ResolutionMode}
        raise ValueError(f"Invalid resolution mode: {value}. Must be one of {valid}") from None


def load_config() -> GWPolicyConfig:
    """Load configuration from GWPOLICY_* environment variables."""
    return GWPolicyConfig(
        resolution=ResolutionConfig(
            mode=_validate_resolution_mode(_env("RESOLUTION_MODE", "fail_fast")),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
