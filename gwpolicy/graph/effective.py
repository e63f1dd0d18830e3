"""Effective-policy resolution.

Policies are merged along the fixed hierarchy GatewayClass -> Namespace ->
Gateway -> Namespace -> HTTPRoute -> Namespace -> Backend, ancestor first.
Within one level, policies of the same merge-kind are first merged as peers.

Routes and Backends can be reached through several Gateways, so their
results are partitioned by Gateway id.  A Backend first peer-merges the
per-Gateway results of every route that references it and only then
overlays its own namespace and direct policies, once per Gateway.

A Gateway whose class is unresolved has no effective policies, and routes
get no partition for it rather than an empty one.
A route or backend whose upstream failed with a conflict is itself recorded
as failed rather than resolved from the remaining upstreams.

The passes must run gateway -> route -> backend; each reads the previous
pass's results and writes only its own node kind.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from gwpolicy.errors import MergeConflictError, PolicyResolutionError, UpstreamResolutionError
from gwpolicy.graph.identity import NodeKind, ResourceID
from gwpolicy.graph.nodes import BackendNode, GatewayNode, HTTPRouteNode
from gwpolicy.models.config import ResolutionMode
from gwpolicy.observability.logging import get_logger
from gwpolicy.observability.metrics import merge_conflicts_total
from gwpolicy.policy.base import PoliciesByKind, Policy, PolicyMerger

if TYPE_CHECKING:
    from gwpolicy.graph.model import ResourceModel

_logger = get_logger("graph.effective")

_N = TypeVar("_N")


@dataclass(frozen=True)
class NodeFailure:
    """A node whose effective policies could not be computed.

    ``error`` is the node's own MergeConflictError, or an
    UpstreamResolutionError naming the failed node it depends on.
    """

    node_kind: NodeKind
    node_id: ResourceID
    error: MergeConflictError | UpstreamResolutionError


@dataclass
class ResolutionReport:
    """Outcome of the effective-policy passes."""

    resolved: dict[NodeKind, int] = field(default_factory=dict)
    skipped: dict[NodeKind, int] = field(default_factory=dict)
    failures: list[NodeFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_ids(self) -> set[ResourceID]:
        return {failure.node_id for failure in self.failures}


def _policies(node: Any) -> list[Policy]:
    if node is None:
        return []
    return [policy_node.policy for policy_node in node.policies.values()]


def _run_pass(
    node_kind: NodeKind,
    nodes: dict[ResourceID, _N],
    compute: Callable[[_N], Any],
    mode: ResolutionMode,
    report: ResolutionReport,
) -> None:
    resolved = skipped = 0
    for node_id, node in sorted(nodes.items()):
        try:
            result = compute(node)
        except MergeConflictError as exc:
            merge_conflicts_total.labels(node_kind=str(node_kind)).inc()
            _logger.error("merge_conflict", node_kind=str(node_kind), node=str(node_id), error=str(exc))
            if mode == ResolutionMode.FAIL_FAST:
                raise PolicyResolutionError(str(node_kind), node_id, exc) from exc
            report.failures.append(NodeFailure(node_kind, node_id, exc))
            continue
        except UpstreamResolutionError as exc:
            _logger.warning(
                "upstream_failed", node_kind=str(node_kind), node=str(node_id), upstream=str(exc.upstream_id)
            )
            report.failures.append(NodeFailure(node_kind, node_id, exc))
            continue
        if result is None:
            skipped += 1
            continue
        node.effective_policies = result  # type: ignore[attr-defined]
        resolved += 1

    report.resolved[node_kind] = resolved
    report.skipped[node_kind] = skipped
    _logger.info("effective_pass_complete", node_kind=str(node_kind), resolved=resolved, skipped=skipped)


def gateway_effective_policies(merger: PolicyMerger, gateway: GatewayNode) -> PoliciesByKind | None:
    """GatewayClass -> Gateway namespace -> Gateway.  None if the class is unresolved."""
    if gateway.gateway_class is None:
        _logger.debug("gateway_effective_skipped", gateway=str(gateway.id), reason="gatewayclass unresolved")
        return None

    class_policies = merger.merge_same_kind(_policies(gateway.gateway_class))
    namespace_policies = merger.merge_same_kind(_policies(gateway.namespace))
    gateway_policies = merger.merge_same_kind(_policies(gateway))

    result = merger.merge_different_hierarchy(class_policies, namespace_policies)
    return merger.merge_different_hierarchy(result, gateway_policies)


def http_route_effective_policies(
    merger: PolicyMerger,
    route: HTTPRouteNode,
    failed: Collection[ResourceID] = (),
) -> dict[ResourceID, PoliciesByKind]:
    """Per parent Gateway: Gateway effective -> route namespace -> route.

    Raises UpstreamResolutionError if a parent Gateway is in *failed*.
    """
    for gw_id in sorted(route.gateways):
        if gw_id in failed:
            raise UpstreamResolutionError(str(NodeKind.GATEWAY), gw_id)

    namespace_policies = merger.merge_same_kind(_policies(route.namespace))
    route_policies = merger.merge_same_kind(_policies(route))

    result: dict[ResourceID, PoliciesByKind] = {}
    for gw_id, gateway in sorted(route.gateways.items()):
        if gateway.effective_policies is None:
            _logger.debug("route_partition_skipped", route=str(route.id), gateway=str(gw_id))
            continue
        merged = merger.merge_different_hierarchy(gateway.effective_policies, namespace_policies)
        result[gw_id] = merger.merge_different_hierarchy(merged, route_policies)
    return result


def backend_effective_policies(
    merger: PolicyMerger,
    backend: BackendNode,
    failed: Collection[ResourceID] = (),
) -> dict[ResourceID, PoliciesByKind]:
    """Peer-merge every route's result per Gateway, then overlay backend levels.

    Raises UpstreamResolutionError if a referencing route is in *failed*.
    """
    for route_id in sorted(backend.http_routes):
        if route_id in failed:
            raise UpstreamResolutionError(str(NodeKind.HTTP_ROUTE), route_id)

    namespace_policies = merger.merge_same_kind(_policies(backend.namespace))
    backend_policies = merger.merge_same_kind(_policies(backend))

    result: dict[ResourceID, PoliciesByKind] = {}
    for _, route in sorted(backend.http_routes.items()):
        if route.effective_policies is None:
            continue
        for gw_id, policies in sorted(route.effective_policies.items()):
            result[gw_id] = merger.merge_same_hierarchy(result.get(gw_id), policies)

    # Backend levels are applied once per Gateway, after all routes are folded.
    for gw_id in result:
        merged = merger.merge_different_hierarchy(result[gw_id], namespace_policies)
        result[gw_id] = merger.merge_different_hierarchy(merged, backend_policies)
    return result


def calculate_effective_policies(
    model: ResourceModel,
    mode: ResolutionMode = ResolutionMode.FAIL_FAST,
) -> ResolutionReport:
    """Run the three effective-policy passes over *model*.

    Raises PolicyResolutionError on the first conflict in FAIL_FAST mode.
    In BEST_EFFORT mode conflicts are returned in the report instead, along
    with every route and backend that depends on a failed node.
    """
    merger = model.merger
    report = ResolutionReport()
    _run_pass(
        NodeKind.GATEWAY,
        model.gateways,
        lambda node: gateway_effective_policies(merger, node),
        mode,
        report,
    )
    _run_pass(
        NodeKind.HTTP_ROUTE,
        model.http_routes,
        lambda node: http_route_effective_policies(merger, node, report.failed_ids),
        mode,
        report,
    )
    _run_pass(
        NodeKind.BACKEND,
        model.backends,
        lambda node: backend_effective_policies(merger, node, report.failed_ids),
        mode,
        report,
    )
    return report
