"""Tests for the inherited-policy passes."""

from __future__ import annotations

import pytest

from gwpolicy.errors import PolicyResolutionError
from gwpolicy.graph.identity import (
    ResourceID,
    backend_id,
    gateway_class_id,
    gateway_id,
    http_route_id,
    namespace_id,
    policy_id,
)
from gwpolicy.graph.model import ResourceModel
from gwpolicy.models.config import ResolutionMode
from gwpolicy.models.resources import GATEWAY_API_GROUP, Backend, Gateway, GatewayClass, HTTPRoute, Namespace
from gwpolicy.policy.unstructured import UnstructuredPolicy

_GWC = gateway_class_id("gwc")
_GW1 = gateway_id("infra", "gw-1")
_GW2 = gateway_id("infra", "gw-2")
_ORPHAN = gateway_id("infra", "orphan")
_ROUTE = http_route_id("apps", "route")
_BK = backend_id("", "Service", "apps", "svc")


def _make_policy(
    name: str,
    target_kind: str,
    target_name: str,
    *,
    target_group: str = GATEWAY_API_GROUP,
    namespace: str = "apps",
    inherited: bool = True,
    spec: dict | None = None,
) -> UnstructuredPolicy:
    return UnstructuredPolicy.from_dict(
        {
            "apiVersion": "example.com/v1",
            "kind": "RateLimitPolicy" if inherited else "HeaderPolicy",
            "metadata": {"name": name, "namespace": namespace},
            "spec": {"targetRef": {"group": target_group, "kind": target_kind, "name": target_name}, **(spec or {})},
        },
        inherited=inherited,
    )


def _pid(policy: UnstructuredPolicy) -> ResourceID:
    kind = policy.merge_kind
    return policy_id(kind.group, kind.kind, policy.namespace, policy.name)


def _make_model() -> ResourceModel:
    """Gateways live in ``infra``; the route and backend live in ``apps``."""
    model = ResourceModel()
    model.add_gateway_classes(GatewayClass("gwc"))
    model.add_namespaces(Namespace("infra"), Namespace("apps"))
    model.add_gateways(
        Gateway("infra", "gw-1", "gwc"),
        Gateway("infra", "gw-2", "gwc"),
        Gateway("infra", "orphan", "missing"),
    )
    model.add_http_routes(HTTPRoute("apps", "route"))
    model.add_backends(Backend("apps", "svc"))

    model.connect_gateway_with_gateway_class(_GW1, _GWC)
    model.connect_gateway_with_gateway_class(_GW2, _GWC)
    for gw in (_GW1, _GW2, _ORPHAN):
        model.connect_gateway_with_namespace(gw, namespace_id("infra"))
    model.connect_http_route_with_namespace(_ROUTE, namespace_id("apps"))
    model.connect_http_route_with_gateway(_ROUTE, _GW1)
    model.connect_http_route_with_gateway(_ROUTE, _GW2)
    model.connect_http_route_with_backend(_ROUTE, _BK)
    model.connect_backend_with_namespace(_BK, namespace_id("apps"))
    return model


class TestGatewayInheritance:
    def test_namespace_and_class_inheritable_policies(self) -> None:
        model = _make_model()
        ns_policy = _make_policy("infra-rl", "Namespace", "infra", target_group="", namespace="infra")
        ns_direct = _make_policy("infra-headers", "Namespace", "infra", target_group="", namespace="infra", inherited=False)
        class_policy = _make_policy("class-rl", "GatewayClass", "gwc", namespace="")
        model.attach_policies([ns_policy, ns_direct, class_policy])

        model.calculate_inherited_policies()

        assert set(model.gateways[_GW1].inherited_policies) == {_pid(ns_policy), _pid(class_policy)}

    def test_gateway_own_policies_are_not_inherited_by_itself(self) -> None:
        model = _make_model()
        own = _make_policy("gw-rl", "Gateway", "gw-1", namespace="infra")
        model.attach_policies([own])

        model.calculate_inherited_policies()

        assert model.gateways[_GW1].inherited_policies == {}

    def test_unresolved_class_still_computes_from_namespace(self) -> None:
        model = _make_model()
        ns_policy = _make_policy("infra-rl", "Namespace", "infra", target_group="", namespace="infra")
        model.attach_policies([ns_policy])

        model.calculate_inherited_policies()

        assert set(model.gateways[_ORPHAN].inherited_policies) == {_pid(ns_policy)}


class TestRouteInheritance:
    def test_flat_union_across_gateways(self) -> None:
        model = _make_model()
        class_policy = _make_policy("class-rl", "GatewayClass", "gwc", namespace="")
        gw1_policy = _make_policy("gw-1-rl", "Gateway", "gw-1", namespace="infra")
        gw2_policy = _make_policy("gw-2-rl", "Gateway", "gw-2", namespace="infra")
        gw2_direct = _make_policy("gw-2-headers", "Gateway", "gw-2", namespace="infra", inherited=False)
        apps_policy = _make_policy("apps-rl", "Namespace", "apps", target_group="")
        model.attach_policies([class_policy, gw1_policy, gw2_policy, gw2_direct, apps_policy])

        model.calculate_inherited_policies()

        assert set(model.http_routes[_ROUTE].inherited_policies) == {
            _pid(class_policy),
            _pid(gw1_policy),
            _pid(gw2_policy),
            _pid(apps_policy),
        }

    def test_policy_nodes_are_shared_not_copied(self) -> None:
        model = _make_model()
        policy = _make_policy("gw-1-rl", "Gateway", "gw-1", namespace="infra")
        model.attach_policies([policy])

        model.calculate_inherited_policies()

        assert model.http_routes[_ROUTE].inherited_policies[_pid(policy)] is model.policies[_pid(policy)]


class TestBackendInheritance:
    def test_backend_collects_route_chain(self) -> None:
        model = _make_model()
        gw_policy = _make_policy("gw-1-rl", "Gateway", "gw-1", namespace="infra")
        route_policy = _make_policy("route-rl", "HTTPRoute", "route")
        route_direct = _make_policy("route-headers", "HTTPRoute", "route", inherited=False)
        backend_policy = _make_policy("svc-rl", "Service", "svc", target_group="")
        model.attach_policies([gw_policy, route_policy, route_direct, backend_policy])

        model.calculate_inherited_policies()

        assert set(model.backends[_BK].inherited_policies) == {_pid(gw_policy), _pid(route_policy)}


class TestIndependenceFromEffectivePass:
    def _with_route_conflict(self) -> ResourceModel:
        model = _make_model()
        model.attach_policies(
            [
                _make_policy("headers-a", "HTTPRoute", "route", inherited=False, spec={"mode": "a"}),
                _make_policy("headers-b", "HTTPRoute", "route", inherited=False, spec={"mode": "b"}),
                _make_policy("apps-rl", "Namespace", "apps", target_group=""),
            ]
        )
        return model

    def test_best_effort_conflict_does_not_block_inheritance(self) -> None:
        model = self._with_route_conflict()

        report = model.calculate_effective_policies(ResolutionMode.BEST_EFFORT)
        model.calculate_inherited_policies()

        assert [f.node_id for f in report.failures] == [_ROUTE, _BK]
        assert model.http_routes[_ROUTE].effective_policies is None
        assert len(model.http_routes[_ROUTE].inherited_policies) == 1

    def test_fail_fast_conflict_does_not_block_inheritance(self) -> None:
        model = self._with_route_conflict()

        with pytest.raises(PolicyResolutionError):
            model.calculate_effective_policies(ResolutionMode.FAIL_FAST)
        model.calculate_inherited_policies()

        assert model.http_routes[_ROUTE].inherited_policies is not None
        assert model.backends[_BK].inherited_policies is not None
