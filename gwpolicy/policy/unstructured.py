"""Policy backed by a decoded Kubernetes object."""

from __future__ import annotations

import copy
from typing import Any

from gwpolicy.policy.base import Policy, PolicyKindID, TargetRef

# Label set on a policy CRD to declare whether its instances are inherited.
POLICY_CRD_LABEL = "gateway.networking.k8s.io/policy"


def is_inherited_crd(crd: dict[str, Any]) -> bool:
    """Return True if a policy CRD declares inherited (not direct) semantics."""
    labels = (crd.get("metadata") or {}).get("labels") or {}
    return str(labels.get(POLICY_CRD_LABEL, "")).lower() == "inherited"


class UnstructuredPolicy(Policy):
    """A Policy wrapping the raw dict of a policy object.

    The object is deep-copied on construction, so callers can keep mutating
    their own copy without affecting the graph.
    """

    def __init__(self, obj: dict[str, Any], inherited: bool) -> None:
        self._obj = copy.deepcopy(obj)
        self._inherited = inherited

    @classmethod
    def from_dict(cls, obj: dict[str, Any], *, inherited: bool = False) -> UnstructuredPolicy:
        return cls(obj, inherited)

    def __repr__(self) -> str:
        return f"UnstructuredPolicy({self.merge_kind}, {self.namespace}/{self.name})"

    @property
    def name(self) -> str:
        return str(self._metadata.get("name", ""))

    @property
    def namespace(self) -> str:
        return str(self._metadata.get("namespace", ""))

    @property
    def spec(self) -> dict[str, Any]:
        """A copy of the policy spec."""
        return copy.deepcopy(self._obj.get("spec") or {})

    @property
    def target_ref(self) -> TargetRef:
        ref = (self._obj.get("spec") or {}).get("targetRef") or {}
        return TargetRef(
            group=str(ref.get("group", "")),
            kind=str(ref.get("kind", "")),
            namespace=str(ref.get("namespace") or self.namespace),
            name=str(ref.get("name", "")),
        )

    @property
    def merge_kind(self) -> PolicyKindID:
        api_version = str(self._obj.get("apiVersion", ""))
        group = api_version.rsplit("/", 1)[0] if "/" in api_version else ""
        return PolicyKindID(group=group, kind=str(self._obj.get("kind", "")))

    def is_inherited(self) -> bool:
        return self._inherited

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._obj)

    def with_spec(self, spec: dict[str, Any]) -> UnstructuredPolicy:
        """Return a copy of this policy carrying *spec*."""
        obj = copy.deepcopy(self._obj)
        obj["spec"] = copy.deepcopy(spec)
        return UnstructuredPolicy(obj, self._inherited)

    @property
    def _metadata(self) -> dict[str, Any]:
        return self._obj.get("metadata") or {}
