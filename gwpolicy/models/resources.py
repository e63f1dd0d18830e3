"""Decoded Gateway API resources.

These are the plain-data inputs of the graph builder.  Each type keeps only
the fields the graph needs and can be built from the unstructured dict a
Kubernetes client returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

GATEWAY_API_GROUP = "gateway.networking.k8s.io"
CORE_GROUP = ""


def _metadata(obj: dict[str, Any]) -> dict[str, Any]:
    return obj.get("metadata") or {}


def _spec(obj: dict[str, Any]) -> dict[str, Any]:
    return obj.get("spec") or {}


def _group_of(api_version: str) -> str:
    # "v1" -> core group, "gateway.networking.k8s.io/v1" -> gateway group
    return api_version.rsplit("/", 1)[0] if "/" in api_version else CORE_GROUP


@dataclass(frozen=True)
class GatewayClass:
    name: str
    controller_name: str = ""

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> GatewayClass:
        return cls(
            name=str(_metadata(obj).get("name", "")),
            controller_name=str(_spec(obj).get("controllerName", "")),
        )


@dataclass(frozen=True)
class Namespace:
    name: str
    labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> Namespace:
        meta = _metadata(obj)
        return cls(name=str(meta.get("name", "")), labels=dict(meta.get("labels") or {}))


@dataclass(frozen=True)
class Gateway:
    namespace: str
    name: str
    gateway_class_name: str

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> Gateway:
        meta = _metadata(obj)
        return cls(
            namespace=str(meta.get("namespace", "")),
            name=str(meta.get("name", "")),
            gateway_class_name=str(_spec(obj).get("gatewayClassName", "")),
        )


@dataclass(frozen=True)
class ParentRef:
    """A route's reference to its parent Gateway."""

    namespace: str
    name: str
    group: str = GATEWAY_API_GROUP
    kind: str = "Gateway"


@dataclass(frozen=True)
class BackendRef:
    """A route rule's reference to a backend object."""

    namespace: str
    name: str
    group: str = CORE_GROUP
    kind: str = "Service"


@dataclass(frozen=True)
class HTTPRoute:
    namespace: str
    name: str
    parent_refs: tuple[ParentRef, ...] = ()
    backend_refs: tuple[BackendRef, ...] = ()

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> HTTPRoute:
        meta = _metadata(obj)
        spec = _spec(obj)
        namespace = str(meta.get("namespace", ""))

        parent_refs = tuple(
            ParentRef(
                namespace=str(ref.get("namespace") or namespace),
                name=str(ref.get("name", "")),
                group=str(ref.get("group", GATEWAY_API_GROUP)),
                kind=str(ref.get("kind", "Gateway")),
            )
            for ref in spec.get("parentRefs") or []
        )

        backend_refs: list[BackendRef] = []
        for rule in spec.get("rules") or []:
            for ref in rule.get("backendRefs") or []:
                backend_ref = BackendRef(
                    namespace=str(ref.get("namespace") or namespace),
                    name=str(ref.get("name", "")),
                    group=str(ref.get("group", CORE_GROUP)),
                    kind=str(ref.get("kind", "Service")),
                )
                if backend_ref not in backend_refs:
                    backend_refs.append(backend_ref)

        return cls(
            namespace=namespace,
            name=str(meta.get("name", "")),
            parent_refs=parent_refs,
            backend_refs=tuple(backend_refs),
        )


@dataclass(frozen=True)
class Backend:
    """Any object an HTTPRoute can forward to (a Service in the common case)."""

    namespace: str
    name: str
    group: str = CORE_GROUP
    kind: str = "Service"

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> Backend:
        meta = _metadata(obj)
        return cls(
            namespace=str(meta.get("namespace", "")),
            name=str(meta.get("name", "")),
            group=_group_of(str(obj.get("apiVersion", "v1"))),
            kind=str(obj.get("kind", "Service")),
        )


@dataclass(frozen=True)
class GrantTarget:
    """One entry of a ReferenceGrant's ``spec.to`` list."""

    group: str
    kind: str
    name: str = ""

    def matches(self, backend: Backend) -> bool:
        if self.group != backend.group or self.kind != backend.kind:
            return False
        return not self.name or self.name == backend.name


@dataclass(frozen=True)
class ReferenceGrant:
    namespace: str
    name: str
    to: tuple[GrantTarget, ...] = ()

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> ReferenceGrant:
        meta = _metadata(obj)
        return cls(
            namespace=str(meta.get("namespace", "")),
            name=str(meta.get("name", "")),
            to=tuple(
                GrantTarget(
                    group=str(target.get("group", CORE_GROUP)),
                    kind=str(target.get("kind", "")),
                    name=str(target.get("name", "")),
                )
                for target in _spec(obj).get("to") or []
            ),
        )
