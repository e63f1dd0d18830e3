"""Inherited-policy resolution.

A node's inherited policies are the inheritable policies of its own
namespace plus, for every parent, the parent's inherited policies and the
parent's own inheritable policies.  This is a plain union keyed by policy
id; no merge arithmetic runs here, so a merge conflict elsewhere can never
stop this pass.

Routes and Backends get one flat union across all their Gateways, unlike
effective policies, which are partitioned per Gateway.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gwpolicy.graph.nodes import BackendNode, GatewayNode, HTTPRouteNode, NamespaceNode, PolicyNodes, inheritable
from gwpolicy.observability.logging import get_logger

if TYPE_CHECKING:
    from gwpolicy.graph.model import ResourceModel

_logger = get_logger("graph.inherited")


def _from_namespace(namespace: NamespaceNode | None) -> PolicyNodes:
    return inheritable(namespace.policies) if namespace is not None else {}


def gateway_inherited_policies(gateway: GatewayNode) -> PolicyNodes:
    result = _from_namespace(gateway.namespace)
    if gateway.gateway_class is not None:
        result.update(inheritable(gateway.gateway_class.policies))
    return result


def http_route_inherited_policies(route: HTTPRouteNode) -> PolicyNodes:
    result = _from_namespace(route.namespace)
    for _, gateway in sorted(route.gateways.items()):
        result.update(gateway.inherited_policies or {})
        result.update(inheritable(gateway.policies))
    return result


def backend_inherited_policies(backend: BackendNode) -> PolicyNodes:
    result = _from_namespace(backend.namespace)
    for _, route in sorted(backend.http_routes.items()):
        result.update(route.inherited_policies or {})
        result.update(inheritable(route.policies))
    return result


def calculate_inherited_policies(model: ResourceModel) -> None:
    """Fill ``inherited_policies`` for every Gateway, HTTPRoute and Backend."""
    for gateway in model.gateways.values():
        gateway.inherited_policies = gateway_inherited_policies(gateway)
    for route in model.http_routes.values():
        route.inherited_policies = http_route_inherited_policies(route)
    for backend in model.backends.values():
        backend.inherited_policies = backend_inherited_policies(backend)

    _logger.info(
        "inherited_pass_complete",
        gateways=len(model.gateways),
        http_routes=len(model.http_routes),
        backends=len(model.backends),
    )
