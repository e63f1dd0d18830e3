"""Policy and merge capability contracts.

The graph never inspects a policy's content.  It only needs to know what a
policy targets, whether it is inherited, and how to group it (its merge-kind).
All merge arithmetic lives behind PolicyMerger.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class PolicyKindID:
    """Merge-kind identifier: the group and kind of the policy CRD."""

    group: str
    kind: str

    def __str__(self) -> str:
        return f"{self.kind}.{self.group}" if self.group else self.kind


@dataclass(frozen=True)
class TargetRef:
    """The object a policy is attached to."""

    group: str
    kind: str
    namespace: str
    name: str


class Policy(ABC):
    """A policy object as seen by the resource graph."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the policy object."""

    @property
    @abstractmethod
    def namespace(self) -> str:
        """Namespace of the policy object, empty for cluster-scoped policies."""

    @property
    @abstractmethod
    def target_ref(self) -> TargetRef:
        """Resolved reference to the policy's target."""

    @property
    @abstractmethod
    def merge_kind(self) -> PolicyKindID:
        """Grouping key under which same-kind policies are merged."""

    @abstractmethod
    def is_inherited(self) -> bool:
        """True if the policy propagates to descendants by default."""


PoliciesByKind = dict[PolicyKindID, Policy]


def precedence_key(policy: Policy) -> tuple[PolicyKindID, str, str]:
    """Total order used whenever same-level policies compete.

    Earlier policies take precedence over later ones.
    """
    return (policy.merge_kind, policy.namespace, policy.name)


class PolicyMerger(ABC):
    """Capability that merges policies across and within hierarchy levels.

    Every operation returns a new mapping, never mutates its inputs, and may
    raise MergeConflictError when two policies cannot be reconciled.
    """

    @abstractmethod
    def merge_same_kind(self, policies: Iterable[Policy]) -> PoliciesByKind:
        """Merge policies attached at one hierarchy level into one per kind."""

    @abstractmethod
    def merge_different_hierarchy(
        self,
        ancestor: Mapping[PolicyKindID, Policy] | None,
        specific: Mapping[PolicyKindID, Policy] | None,
    ) -> PoliciesByKind:
        """Overlay *specific* (the more specific level) on top of *ancestor*."""

    @abstractmethod
    def merge_same_hierarchy(
        self,
        first: Mapping[PolicyKindID, Policy] | None,
        second: Mapping[PolicyKindID, Policy] | None,
    ) -> PoliciesByKind:
        """Reconcile two mappings that sit at the same hierarchy level."""
