"""Node types of the resource graph.

Nodes never own each other.  All nodes of a kind live in one dict on the
ResourceModel; the references below are lookups into those dicts, keyed by
ResourceID, and every edge is stored on both of its endpoints.

Computed fields (``effective_policies``, ``inherited_policies``) stay None
until the pass that fills them has run for that node.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gwpolicy.graph.identity import (
    ResourceID,
    backend_id,
    gateway_class_id,
    gateway_id,
    http_route_id,
    namespace_id,
    policy_id,
    reference_grant_id,
)
from gwpolicy.models.resources import Backend, Gateway, GatewayClass, HTTPRoute, Namespace, ReferenceGrant
from gwpolicy.policy.base import PoliciesByKind, Policy

PolicyNodes = dict[ResourceID, "PolicyNode"]


def inheritable(policies: PolicyNodes) -> PolicyNodes:
    """Return the subset of *policies* that propagate to descendants."""
    return {pid: node for pid, node in policies.items() if node.policy.is_inherited()}


@dataclass(eq=False)
class GatewayClassNode:
    gateway_class: GatewayClass
    policies: PolicyNodes = field(default_factory=dict, repr=False)
    gateways: dict[ResourceID, GatewayNode] = field(default_factory=dict, repr=False)

    @property
    def id(self) -> ResourceID:
        return gateway_class_id(self.gateway_class.name)


@dataclass(eq=False)
class NamespaceNode:
    namespace: Namespace
    policies: PolicyNodes = field(default_factory=dict, repr=False)
    gateways: dict[ResourceID, GatewayNode] = field(default_factory=dict, repr=False)
    http_routes: dict[ResourceID, HTTPRouteNode] = field(default_factory=dict, repr=False)
    backends: dict[ResourceID, BackendNode] = field(default_factory=dict, repr=False)

    @property
    def id(self) -> ResourceID:
        return namespace_id(self.namespace.name)


@dataclass(eq=False)
class GatewayNode:
    gateway: Gateway
    gateway_class: GatewayClassNode | None = field(default=None, repr=False)
    namespace: NamespaceNode | None = field(default=None, repr=False)
    policies: PolicyNodes = field(default_factory=dict, repr=False)
    http_routes: dict[ResourceID, HTTPRouteNode] = field(default_factory=dict, repr=False)

    # Single reachability path, so the result is flat.
    effective_policies: PoliciesByKind | None = field(default=None, repr=False)
    inherited_policies: PolicyNodes | None = field(default=None, repr=False)

    @property
    def id(self) -> ResourceID:
        return gateway_id(self.gateway.namespace, self.gateway.name)


@dataclass(eq=False)
class HTTPRouteNode:
    http_route: HTTPRoute
    namespace: NamespaceNode | None = field(default=None, repr=False)
    gateways: dict[ResourceID, GatewayNode] = field(default_factory=dict, repr=False)
    backends: dict[ResourceID, BackendNode] = field(default_factory=dict, repr=False)
    policies: PolicyNodes = field(default_factory=dict, repr=False)

    # Partitioned by the Gateway the route is reached through.
    effective_policies: dict[ResourceID, PoliciesByKind] | None = field(default=None, repr=False)
    # Flat union across all parent Gateways.
    inherited_policies: PolicyNodes | None = field(default=None, repr=False)

    @property
    def id(self) -> ResourceID:
        return http_route_id(self.http_route.namespace, self.http_route.name)


@dataclass(eq=False)
class BackendNode:
    backend: Backend
    namespace: NamespaceNode | None = field(default=None, repr=False)
    http_routes: dict[ResourceID, HTTPRouteNode] = field(default_factory=dict, repr=False)
    reference_grants: dict[ResourceID, ReferenceGrantNode] = field(default_factory=dict, repr=False)
    policies: PolicyNodes = field(default_factory=dict, repr=False)

    effective_policies: dict[ResourceID, PoliciesByKind] | None = field(default=None, repr=False)
    inherited_policies: PolicyNodes | None = field(default=None, repr=False)

    @property
    def id(self) -> ResourceID:
        b = self.backend
        return backend_id(b.group, b.kind, b.namespace, b.name)


@dataclass(eq=False)
class ReferenceGrantNode:
    reference_grant: ReferenceGrant
    backends: dict[ResourceID, BackendNode] = field(default_factory=dict, repr=False)

    @property
    def id(self) -> ResourceID:
        return reference_grant_id(self.reference_grant.namespace, self.reference_grant.name)


@dataclass(eq=False)
class PolicyNode:
    """Wraps one policy.  Exactly one target back-reference is set."""

    policy: Policy
    gateway_class: GatewayClassNode | None = field(default=None, repr=False)
    namespace: NamespaceNode | None = field(default=None, repr=False)
    gateway: GatewayNode | None = field(default=None, repr=False)
    http_route: HTTPRouteNode | None = field(default=None, repr=False)
    backend: BackendNode | None = field(default=None, repr=False)

    @property
    def id(self) -> ResourceID:
        kind = self.policy.merge_kind
        return policy_id(kind.group, kind.kind, self.policy.namespace, self.policy.name)

    @property
    def target(self) -> GatewayClassNode | NamespaceNode | GatewayNode | HTTPRouteNode | BackendNode | None:
        return self.gateway_class or self.namespace or self.gateway or self.http_route or self.backend
