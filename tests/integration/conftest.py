"""Shared fixtures for gwpolicy integration tests.

Provides unstructured Kubernetes objects for a small but complete topology
so tests can exercise the whole discovery pipeline:

    GatewayClass gwc
    Namespace    prod
      Gateway        prod/gw          (-> gwc)
      HTTPRoute      prod/rt          (-> gw, -> Service bk)
      Service        prod/bk
      ReferenceGrant prod/allow-routes (to Service)

Policies:
    RateLimitPolicy prod/ns-rate-limit  inherited, on Namespace prod
    HeaderPolicy    prod/rt-headers     direct, on HTTPRoute rt
"""

from __future__ import annotations

from typing import Any

import pytest

from gwpolicy.discovery import ResourceSnapshot
from gwpolicy.policy.unstructured import UnstructuredPolicy

_GATEWAY_API_V1 = "gateway.networking.k8s.io/v1"


# ---------------------------------------------------------------------------
# Object factory helpers
# ---------------------------------------------------------------------------


def make_gateway_class(name: str = "gwc") -> dict[str, Any]:
    return {
        "apiVersion": _GATEWAY_API_V1,
        "kind": "GatewayClass",
        "metadata": {"name": name},
        "spec": {"controllerName": "example.com/gateway-controller"},
    }


def make_namespace(name: str = "prod") -> dict[str, Any]:
    return {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": name}}


def make_gateway(namespace: str = "prod", name: str = "gw", gateway_class: str = "gwc") -> dict[str, Any]:
    return {
        "apiVersion": _GATEWAY_API_V1,
        "kind": "Gateway",
        "metadata": {"namespace": namespace, "name": name},
        "spec": {"gatewayClassName": gateway_class, "listeners": [{"name": "http", "port": 80, "protocol": "HTTP"}]},
    }


def make_http_route(
    namespace: str = "prod",
    name: str = "rt",
    parents: list[dict[str, Any]] | None = None,
    backends: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "apiVersion": _GATEWAY_API_V1,
        "kind": "HTTPRoute",
        "metadata": {"namespace": namespace, "name": name},
        "spec": {
            "parentRefs": parents if parents is not None else [{"name": "gw"}],
            "rules": [{"backendRefs": backends if backends is not None else [{"name": "bk", "port": 8080}]}],
        },
    }


def make_service(namespace: str = "prod", name: str = "bk") -> dict[str, Any]:
    return {"apiVersion": "v1", "kind": "Service", "metadata": {"namespace": namespace, "name": name}}


def make_reference_grant(namespace: str = "prod", name: str = "allow-routes") -> dict[str, Any]:
    return {
        "apiVersion": "gateway.networking.k8s.io/v1beta1",
        "kind": "ReferenceGrant",
        "metadata": {"namespace": namespace, "name": name},
        "spec": {
            "from": [{"group": "gateway.networking.k8s.io", "kind": "HTTPRoute", "namespace": "other"}],
            "to": [{"group": "", "kind": "Service"}],
        },
    }


def make_policy(
    kind: str,
    name: str,
    target: dict[str, Any],
    spec: dict[str, Any],
    *,
    namespace: str = "prod",
    inherited: bool,
) -> UnstructuredPolicy:
    return UnstructuredPolicy.from_dict(
        {
            "apiVersion": "policies.example.com/v1alpha1",
            "kind": kind,
            "metadata": {"namespace": namespace, "name": name},
            "spec": {"targetRef": target, **spec},
        },
        inherited=inherited,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def rate_limit_policy() -> UnstructuredPolicy:
    return make_policy(
        "RateLimitPolicy",
        "ns-rate-limit",
        {"group": "", "kind": "Namespace", "name": "prod"},
        {"default": {"requestsPerSecond": 100}},
        inherited=True,
    )


@pytest.fixture
def header_policy() -> UnstructuredPolicy:
    return make_policy(
        "HeaderPolicy",
        "rt-headers",
        {"group": "gateway.networking.k8s.io", "kind": "HTTPRoute", "name": "rt"},
        {"add": {"x-env": "prod"}},
        inherited=False,
    )


@pytest.fixture
def snapshot(rate_limit_policy: UnstructuredPolicy, header_policy: UnstructuredPolicy) -> ResourceSnapshot:
    return ResourceSnapshot.from_dicts(
        gateway_classes=[make_gateway_class()],
        namespaces=[make_namespace()],
        gateways=[make_gateway()],
        http_routes=[make_http_route()],
        backends=[make_service()],
        reference_grants=[make_reference_grant()],
        policies=[rate_limit_policy, header_policy],
    )
