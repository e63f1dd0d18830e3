"""Attaching policies to their target nodes.

A policy's targetRef maps onto a closed set of target kinds.  Each kind has
one resolver that computes the target's ResourceID, finds the node dict to
look it up in, and names the PolicyNode back-reference to set.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from gwpolicy.graph.identity import ResourceID, backend_id, gateway_class_id, gateway_id, http_route_id, namespace_id
from gwpolicy.graph.nodes import PolicyNode
from gwpolicy.models.resources import CORE_GROUP, GATEWAY_API_GROUP
from gwpolicy.observability.logging import get_logger
from gwpolicy.observability.metrics import policies_attached_total
from gwpolicy.policy.base import Policy, TargetRef

if TYPE_CHECKING:
    from gwpolicy.graph.model import ResourceModel

_logger = get_logger("graph.attach")


class TargetKind(StrEnum):
    GATEWAY_CLASS = "GatewayClass"
    NAMESPACE = "Namespace"
    GATEWAY = "Gateway"
    HTTP_ROUTE = "HTTPRoute"
    BACKEND = "Backend"


@dataclass(frozen=True)
class _TargetResolver:
    target_id: Callable[[TargetRef], ResourceID]
    nodes: Callable[[ResourceModel], dict[ResourceID, Any]]
    backref: str


_RESOLVERS: dict[TargetKind, _TargetResolver] = {
    TargetKind.GATEWAY_CLASS: _TargetResolver(
        target_id=lambda ref: gateway_class_id(ref.name),
        nodes=lambda model: model.gateway_classes,
        backref="gateway_class",
    ),
    TargetKind.NAMESPACE: _TargetResolver(
        target_id=lambda ref: namespace_id(ref.name),
        nodes=lambda model: model.namespaces,
        backref="namespace",
    ),
    TargetKind.GATEWAY: _TargetResolver(
        target_id=lambda ref: gateway_id(ref.namespace, ref.name),
        nodes=lambda model: model.gateways,
        backref="gateway",
    ),
    TargetKind.HTTP_ROUTE: _TargetResolver(
        target_id=lambda ref: http_route_id(ref.namespace, ref.name),
        nodes=lambda model: model.http_routes,
        backref="http_route",
    ),
    TargetKind.BACKEND: _TargetResolver(
        target_id=lambda ref: backend_id(ref.group, ref.kind, ref.namespace, ref.name),
        nodes=lambda model: model.backends,
        backref="backend",
    ),
}

_GATEWAY_API_TARGETS = {
    "GatewayClass": TargetKind.GATEWAY_CLASS,
    "Gateway": TargetKind.GATEWAY,
    "HTTPRoute": TargetKind.HTTP_ROUTE,
}


def classify_target(ref: TargetRef) -> TargetKind | None:
    """Return the kind of node *ref* points at, or None if unsupported.

    Anything outside the Gateway API group and the core Namespace kind is
    assumed to be a backend.
    """
    if ref.group == GATEWAY_API_GROUP:
        return _GATEWAY_API_TARGETS.get(ref.kind)
    if ref.group == CORE_GROUP and ref.kind == "Namespace":
        return TargetKind.NAMESPACE
    return TargetKind.BACKEND


def attach_policy(model: ResourceModel, policy: Policy) -> PolicyNode | None:
    """Attach *policy* to its target node in *model*.

    Returns the attached PolicyNode (the existing one when a policy with the
    same id is already attached), or None when the policy was dropped (the
    reason is recorded on ``model.diagnostics``).
    """
    policy_node = PolicyNode(policy)
    ref = policy.target_ref
    target_kind = classify_target(ref)
    if target_kind is None:
        model.diagnostics.policy_dropped(
            policy_node.id, None, f"targetRef kind {ref.kind} in group {ref.group} cannot carry policies"
        )
        return None

    resolver = _RESOLVERS[target_kind]
    target_id = resolver.target_id(ref)
    target = resolver.nodes(model).get(target_id)
    if target is None:
        model.diagnostics.policy_dropped(
            policy_node.id, target_id, f"targetRef {target_kind} does not exist in the resource model"
        )
        return None

    if policy_node.id in model.policies:
        _logger.debug("policy_already_attached", policy=str(policy_node.id))
        return model.policies[policy_node.id]

    setattr(policy_node, resolver.backref, target)
    target.policies[policy_node.id] = policy_node
    model.policies[policy_node.id] = policy_node
    policies_attached_total.labels(target_kind=str(target_kind)).inc()
    return policy_node
