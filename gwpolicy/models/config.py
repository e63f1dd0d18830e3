"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ResolutionMode(StrEnum):
    """What an effective-policy pass does when one node hits a merge conflict.

    FAIL_FAST   -- stop the pass and raise PolicyResolutionError.  Nodes
                   resolved before the failure keep their results.
    BEST_EFFORT -- record the failure, leave that node uncomputed and
                   continue with the remaining nodes.  Routes under a failed
                   Gateway and backends under a failed route are recorded as
                   failed too (UpstreamResolutionError) and left uncomputed,
                   never resolved from their remaining upstreams.
    """

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class ResolutionConfig:
    """Policy resolution configuration."""

    mode: ResolutionMode = ResolutionMode.FAIL_FAST


@dataclass
class GWPolicyConfig:
    """Top-level gwpolicy configuration."""

    resolution: ResolutionConfig = field(default_factory=ResolutionConfig)
    log: LogConfig = field(default_factory=LogConfig)
