"""Building a fully resolved ResourceModel from one snapshot of resources.

The snapshot is assumed complete: every resource kind has already been
fetched and decoded.  ``build_resource_model`` runs the whole pipeline in
the only order that produces a correct graph:

    nodes -> edges -> policies -> effective passes -> inherited passes

Usage::

    configure_from_env()  # once per process: GWPOLICY_LOG_LEVEL / GWPOLICY_LOG_FORMAT
    snapshot = ResourceSnapshot.from_dicts(gateways=[...], http_routes=[...], ...)
    model = build_resource_model(snapshot)
    model.http_routes[http_route_id("default", "web")].effective_policies
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from gwpolicy.config import load_config
from gwpolicy.graph.diagnostics import DiagnosticSink
from gwpolicy.graph.effective import ResolutionReport
from gwpolicy.graph.identity import (
    backend_id,
    gateway_class_id,
    gateway_id,
    http_route_id,
    namespace_id,
    reference_grant_id,
)
from gwpolicy.graph.model import ResourceModel
from gwpolicy.models.config import ResolutionMode
from gwpolicy.models.resources import (
    GATEWAY_API_GROUP,
    Backend,
    Gateway,
    GatewayClass,
    HTTPRoute,
    Namespace,
    ReferenceGrant,
)
from gwpolicy.observability.logging import get_logger
from gwpolicy.policy.base import Policy, PolicyMerger

_logger = get_logger("discovery")


@dataclass
class ResourceSnapshot:
    """Complete, already-decoded batches of every resource kind."""

    gateway_classes: list[GatewayClass] = field(default_factory=list)
    namespaces: list[Namespace] = field(default_factory=list)
    gateways: list[Gateway] = field(default_factory=list)
    http_routes: list[HTTPRoute] = field(default_factory=list)
    backends: list[Backend] = field(default_factory=list)
    reference_grants: list[ReferenceGrant] = field(default_factory=list)
    policies: list[Policy] = field(default_factory=list)

    @classmethod
    def from_dicts(
        cls,
        *,
        gateway_classes: Iterable[dict[str, Any]] = (),
        namespaces: Iterable[dict[str, Any]] = (),
        gateways: Iterable[dict[str, Any]] = (),
        http_routes: Iterable[dict[str, Any]] = (),
        backends: Iterable[dict[str, Any]] = (),
        reference_grants: Iterable[dict[str, Any]] = (),
        policies: Iterable[Policy] = (),
    ) -> ResourceSnapshot:
        """Decode unstructured Kubernetes objects into a snapshot."""
        return cls(
            gateway_classes=[GatewayClass.from_dict(o) for o in gateway_classes],
            namespaces=[Namespace.from_dict(o) for o in namespaces],
            gateways=[Gateway.from_dict(o) for o in gateways],
            http_routes=[HTTPRoute.from_dict(o) for o in http_routes],
            backends=[Backend.from_dict(o) for o in backends],
            reference_grants=[ReferenceGrant.from_dict(o) for o in reference_grants],
            policies=list(policies),
        )


@dataclass
class DiscoveryResult:
    model: ResourceModel
    report: ResolutionReport

    @property
    def diagnostics(self) -> DiagnosticSink:
        return self.model.diagnostics


def connect_resources(model: ResourceModel, snapshot: ResourceSnapshot) -> None:
    """Derive every edge from the references the resources declare."""
    for gateway in snapshot.gateways:
        gw_id = gateway_id(gateway.namespace, gateway.name)
        model.connect_gateway_with_gateway_class(gw_id, gateway_class_id(gateway.gateway_class_name))
        model.connect_gateway_with_namespace(gw_id, namespace_id(gateway.namespace))

    for route in snapshot.http_routes:
        route_id = http_route_id(route.namespace, route.name)
        model.connect_http_route_with_namespace(route_id, namespace_id(route.namespace))
        for parent in route.parent_refs:
            if parent.group != GATEWAY_API_GROUP or parent.kind != "Gateway":
                _logger.debug("parent_ref_ignored", route=str(route_id), kind=parent.kind)
                continue
            model.connect_http_route_with_gateway(route_id, gateway_id(parent.namespace, parent.name))
        for ref in route.backend_refs:
            model.connect_http_route_with_backend(route_id, backend_id(ref.group, ref.kind, ref.namespace, ref.name))

    for backend in snapshot.backends:
        model.connect_backend_with_namespace(
            backend_id(backend.group, backend.kind, backend.namespace, backend.name),
            namespace_id(backend.namespace),
        )

    for grant in snapshot.reference_grants:
        grant_id = reference_grant_id(grant.namespace, grant.name)
        for backend in snapshot.backends:
            if backend.namespace != grant.namespace:
                continue
            if any(target.matches(backend) for target in grant.to):
                model.connect_reference_grant_with_backend(
                    grant_id, backend_id(backend.group, backend.kind, backend.namespace, backend.name)
                )


def build_resource_model(
    snapshot: ResourceSnapshot,
    merger: PolicyMerger | None = None,
    *,
    diagnostics: DiagnosticSink | None = None,
    mode: ResolutionMode | None = None,
) -> DiscoveryResult:
    """Assemble and resolve a ResourceModel from *snapshot*.

    Args:
        snapshot:    complete resource batches.
        merger:      merge capability; defaults to a MergerRegistry.
        diagnostics: sink for structural warnings; a new one by default.
        mode:        conflict handling; defaults to GWPOLICY_RESOLUTION_MODE.

    Raises:
        PolicyResolutionError: a merge conflict occurred in FAIL_FAST mode.
    """
    if mode is None:
        mode = load_config().resolution.mode

    model = ResourceModel(merger=merger, diagnostics=diagnostics)
    model.add_gateway_classes(*snapshot.gateway_classes)
    model.add_namespaces(*snapshot.namespaces)
    model.add_gateways(*snapshot.gateways)
    model.add_http_routes(*snapshot.http_routes)
    model.add_backends(*snapshot.backends)
    model.add_reference_grants(*snapshot.reference_grants)

    connect_resources(model, snapshot)
    model.attach_policies(snapshot.policies)

    try:
        report = model.calculate_effective_policies(mode)
    finally:
        # Inheritance does no merge arithmetic and must complete even when
        # an effective pass aborts.
        model.calculate_inherited_policies()

    _logger.info(
        "resource_model_built",
        gateways=len(model.gateways),
        http_routes=len(model.http_routes),
        backends=len(model.backends),
        policies=len(model.policies),
        diagnostics=len(model.diagnostics),
        failures=len(report.failures),
    )
    return DiscoveryResult(model=model, report=report)
