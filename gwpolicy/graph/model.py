"""ResourceModel: the graph of Gateway API resources and their policies.

Assembly happens in three steps that callers must run in order:

1. ``add_*``     -- insert nodes, one batch per kind.  Insertion is keyed
                    by ResourceID and idempotent; the first resource wins.
2. ``connect_*`` -- wire edges between existing nodes.  A missing endpoint
                    turns the call into a no-op plus a Diagnostic.  Edges
                    are never re-evaluated, so inserting the endpoint later
                    does not create the edge.
3. ``attach_policies`` -- attach policies to nodes that exist by now.

Resolution then runs via ``calculate_effective_policies`` and
``calculate_inherited_policies``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from gwpolicy.graph import attach, effective, inherited
from gwpolicy.graph.diagnostics import DiagnosticSink
from gwpolicy.graph.effective import ResolutionReport
from gwpolicy.graph.identity import ResourceID
from gwpolicy.graph.nodes import (
    BackendNode,
    GatewayClassNode,
    GatewayNode,
    HTTPRouteNode,
    NamespaceNode,
    PolicyNode,
    ReferenceGrantNode,
)
from gwpolicy.models.config import ResolutionMode
from gwpolicy.models.resources import Backend, Gateway, GatewayClass, HTTPRoute, Namespace, ReferenceGrant
from gwpolicy.observability.logging import get_logger
from gwpolicy.policy.base import Policy, PolicyMerger
from gwpolicy.policy.merger import MergerRegistry

_logger = get_logger("graph.model")

_N = TypeVar("_N")


def _insert(nodes: dict[ResourceID, _N], node: _N) -> None:
    node_id = node.id  # type: ignore[attr-defined]
    if node_id not in nodes:
        nodes[node_id] = node


class ResourceModel:
    """Arena of graph nodes, one dict per kind keyed by ResourceID."""

    def __init__(
        self,
        merger: PolicyMerger | None = None,
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        self.merger: PolicyMerger = merger or MergerRegistry()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticSink()

        self.gateway_classes: dict[ResourceID, GatewayClassNode] = {}
        self.namespaces: dict[ResourceID, NamespaceNode] = {}
        self.gateways: dict[ResourceID, GatewayNode] = {}
        self.http_routes: dict[ResourceID, HTTPRouteNode] = {}
        self.backends: dict[ResourceID, BackendNode] = {}
        self.reference_grants: dict[ResourceID, ReferenceGrantNode] = {}
        self.policies: dict[ResourceID, PolicyNode] = {}

    # ------------------------------------------------------------------
    # Node insertion
    # ------------------------------------------------------------------

    def add_gateway_classes(self, *gateway_classes: GatewayClass) -> None:
        for gateway_class in gateway_classes:
            _insert(self.gateway_classes, GatewayClassNode(gateway_class))

    def add_namespaces(self, *namespaces: Namespace) -> None:
        for namespace in namespaces:
            _insert(self.namespaces, NamespaceNode(namespace))

    def add_gateways(self, *gateways: Gateway) -> None:
        for gateway in gateways:
            _insert(self.gateways, GatewayNode(gateway))

    def add_http_routes(self, *http_routes: HTTPRoute) -> None:
        for http_route in http_routes:
            _insert(self.http_routes, HTTPRouteNode(http_route))

    def add_backends(self, *backends: Backend) -> None:
        for backend in backends:
            _insert(self.backends, BackendNode(backend))

    def add_reference_grants(self, *reference_grants: ReferenceGrant) -> None:
        for reference_grant in reference_grants:
            _insert(self.reference_grants, ReferenceGrantNode(reference_grant))

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _endpoints(
        self,
        edge: str,
        source_nodes: dict[ResourceID, _N],
        source_id: ResourceID,
        target_nodes: dict[ResourceID, object],
        target_id: ResourceID,
    ) -> tuple[_N, object] | None:
        source = source_nodes.get(source_id)
        if source is None:
            self.diagnostics.connection_skipped(edge, source_id, source_id)
            return None
        target = target_nodes.get(target_id)
        if target is None:
            self.diagnostics.connection_skipped(edge, source_id, target_id)
            return None
        return source, target

    def connect_gateway_with_gateway_class(self, gw_id: ResourceID, gwc_id: ResourceID) -> None:
        found = self._endpoints("gateway_gatewayclass", self.gateways, gw_id, self.gateway_classes, gwc_id)
        if found is None:
            return
        gateway, gateway_class = found
        assert isinstance(gateway_class, GatewayClassNode)
        gateway.gateway_class = gateway_class
        gateway_class.gateways[gw_id] = gateway

    def connect_http_route_with_gateway(self, route_id: ResourceID, gw_id: ResourceID) -> None:
        found = self._endpoints("httproute_gateway", self.http_routes, route_id, self.gateways, gw_id)
        if found is None:
            return
        route, gateway = found
        assert isinstance(gateway, GatewayNode)
        route.gateways[gw_id] = gateway
        gateway.http_routes[route_id] = route

    def connect_http_route_with_backend(self, route_id: ResourceID, b_id: ResourceID) -> None:
        found = self._endpoints("httproute_backend", self.http_routes, route_id, self.backends, b_id)
        if found is None:
            return
        route, backend = found
        assert isinstance(backend, BackendNode)
        route.backends[b_id] = backend
        backend.http_routes[route_id] = route

    def connect_gateway_with_namespace(self, gw_id: ResourceID, ns_id: ResourceID) -> None:
        found = self._endpoints("gateway_namespace", self.gateways, gw_id, self.namespaces, ns_id)
        if found is None:
            return
        gateway, namespace = found
        assert isinstance(namespace, NamespaceNode)
        gateway.namespace = namespace
        namespace.gateways[gw_id] = gateway

    def connect_http_route_with_namespace(self, route_id: ResourceID, ns_id: ResourceID) -> None:
        found = self._endpoints("httproute_namespace", self.http_routes, route_id, self.namespaces, ns_id)
        if found is None:
            return
        route, namespace = found
        assert isinstance(namespace, NamespaceNode)
        route.namespace = namespace
        namespace.http_routes[route_id] = route

    def connect_backend_with_namespace(self, b_id: ResourceID, ns_id: ResourceID) -> None:
        found = self._endpoints("backend_namespace", self.backends, b_id, self.namespaces, ns_id)
        if found is None:
            return
        backend, namespace = found
        assert isinstance(namespace, NamespaceNode)
        backend.namespace = namespace
        namespace.backends[b_id] = backend

    def connect_reference_grant_with_backend(self, grant_id: ResourceID, b_id: ResourceID) -> None:
        found = self._endpoints("referencegrant_backend", self.reference_grants, grant_id, self.backends, b_id)
        if found is None:
            return
        grant, backend = found
        assert isinstance(backend, BackendNode)
        grant.backends[b_id] = backend
        backend.reference_grants[grant_id] = grant

    # ------------------------------------------------------------------
    # Policies and resolution
    # ------------------------------------------------------------------

    def attach_policies(self, policies: Iterable[Policy]) -> None:
        """Attach each policy to its target, dropping policies without one."""
        before = len(self.policies)
        seen = dropped = 0
        for policy in policies:
            seen += 1
            if attach.attach_policy(self, policy) is None:
                dropped += 1
        attached = len(self.policies) - before
        _logger.debug(
            "policies_attached",
            attached=attached,
            duplicates=seen - attached - dropped,
            dropped=dropped,
            total=len(self.policies),
        )

    def calculate_effective_policies(self, mode: ResolutionMode = ResolutionMode.FAIL_FAST) -> ResolutionReport:
        """Run the gateway, route and backend effective-policy passes in order."""
        return effective.calculate_effective_policies(self, mode)

    def calculate_inherited_policies(self) -> None:
        """Run the gateway, route and backend inherited-policy passes in order."""
        inherited.calculate_inherited_policies(self)
