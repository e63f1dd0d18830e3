"""Plain data structures: decoded resources and configuration."""

from gwpolicy.models.config import GWPolicyConfig, LogConfig, ResolutionConfig, ResolutionMode
from gwpolicy.models.resources import (
    Backend,
    BackendRef,
    Gateway,
    GatewayClass,
    GrantTarget,
    HTTPRoute,
    Namespace,
    ParentRef,
    ReferenceGrant,
)

__all__ = [
    "Backend",
    "BackendRef",
    "GWPolicyConfig",
    "Gateway",
    "GatewayClass",
    "GrantTarget",
    "HTTPRoute",
    "LogConfig",
    "Namespace",
    "ParentRef",
    "ReferenceGrant",
    "ResolutionConfig",
    "ResolutionMode",
]
