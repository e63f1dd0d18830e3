"""Structured logging configuration using structlog.

gwpolicy is embedded in tools that render their own output to stdout, so
every log line goes to stderr.  ``json`` is meant for collectors, ``console``
for an operator watching a terminal.
"""

from __future__ import annotations

import logging
import sys

import structlog

from gwpolicy.config import load_config
from gwpolicy.models.config import GWPolicyConfig


def setup_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog processors, level filtering and the renderer."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer = structlog.dev.ConsoleRenderer(colors=False) if fmt == "console" else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def configure_from_env() -> GWPolicyConfig:
    """Load GWPOLICY_* settings and apply the log level and format.

    Call once at process startup, before building a model.
    """
    config = load_config()
    setup_logging(config.log.level, config.log.format)
    return config


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with ``component=gwpolicy.<component>``."""
    return structlog.get_logger(component=f"gwpolicy.{component}")  # type: ignore[return-value]
