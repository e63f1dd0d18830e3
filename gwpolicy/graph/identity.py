"""Identifiers for nodes of the resource graph.

Every identifier is a pure function of the resource's natural key.  The key
is kept as a tuple of fields rather than a joined string, so names containing
separators can never make two distinct resources collide.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class NodeKind(StrEnum):
    """Kinds of node held by a ResourceModel."""

    GATEWAY_CLASS = "GatewayClass"
    NAMESPACE = "Namespace"
    GATEWAY = "Gateway"
    HTTP_ROUTE = "HTTPRoute"
    BACKEND = "Backend"
    REFERENCE_GRANT = "ReferenceGrant"
    POLICY = "Policy"


@dataclass(frozen=True, order=True)
class ResourceID:
    """Opaque, ordered and hashable identifier of a graph node."""

    node_kind: NodeKind
    group: str = ""
    kind: str = ""
    namespace: str = ""
    name: str = ""

    def __str__(self) -> str:
        parts = [p for p in (self.group, self.kind, self.namespace) if p]
        parts.append(self.name)
        return f"{self.node_kind}::{'/'.join(parts)}"


def gateway_class_id(name: str) -> ResourceID:
    return ResourceID(NodeKind.GATEWAY_CLASS, name=name)


def namespace_id(name: str) -> ResourceID:
    return ResourceID(NodeKind.NAMESPACE, name=name)


def gateway_id(namespace: str, name: str) -> ResourceID:
    return ResourceID(NodeKind.GATEWAY, namespace=namespace, name=name)


def http_route_id(namespace: str, name: str) -> ResourceID:
    return ResourceID(NodeKind.HTTP_ROUTE, namespace=namespace, name=name)


def backend_id(group: str, kind: str, namespace: str, name: str) -> ResourceID:
    """Backends are arbitrary objects, so group and kind are part of the key."""
    return ResourceID(NodeKind.BACKEND, group=group, kind=kind, namespace=namespace, name=name)


def reference_grant_id(namespace: str, name: str) -> ResourceID:
    return ResourceID(NodeKind.REFERENCE_GRANT, namespace=namespace, name=name)


def policy_id(group: str, kind: str, namespace: str, name: str) -> ResourceID:
    return ResourceID(NodeKind.POLICY, group=group, kind=kind, namespace=namespace, name=name)
