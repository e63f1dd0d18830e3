"""Pluggable merge arithmetic for policies.

MergerRegistry implements the PolicyMerger capability consumed by the
effective-policy resolver.  It groups policies by merge-kind and delegates
the actual combination of two policies to a KindMerger registered for that
kind, falling back to SpecMerger.

SpecMerger semantics:
  inherited policies -- ``spec.default`` values from the more specific level
                        win, ``spec.override`` values from the ancestor win.
                        Between peers the first policy (in precedence order)
                        wins both sections.
  direct policies    -- specs are unioned; a leaf set to two different values
                        is a conflict.  Direct policies are carried unchanged
                        into descendant results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from gwpolicy.errors import MergeConflictError
from gwpolicy.policy.base import PoliciesByKind, Policy, PolicyKindID, PolicyMerger, precedence_key
from gwpolicy.policy.unstructured import UnstructuredPolicy

_DEFAULT = "default"
_OVERRIDE = "override"
_TARGET_REF = "targetRef"


class KindMerger(ABC):
    """Merges two policies of one merge-kind."""

    @abstractmethod
    def merge(self, ancestor: Policy, descendant: Policy) -> Policy:
        """Merge policies from two different hierarchy levels."""

    @abstractmethod
    def merge_peers(self, first: Policy, second: Policy) -> Policy:
        """Merge two policies at the same level; *first* has precedence."""


def _overlay(base: dict[str, Any], top: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge *top* onto *base*; values in *top* win."""
    result = dict(base)
    for key, value in top.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _overlay(result[key], value)
        else:
            result[key] = value
    return result


def _union(a: dict[str, Any], b: dict[str, Any], kind: PolicyKindID, path: str = "spec") -> dict[str, Any]:
    """Deep-merge two dicts, raising on any leaf set to different values."""
    result = dict(a)
    for key, value in b.items():
        if key not in result:
            result[key] = value
            continue
        existing = result[key]
        if isinstance(existing, dict) and isinstance(value, dict):
            result[key] = _union(existing, value, kind, f"{path}.{key}")
        elif existing != value:
            raise MergeConflictError(kind, f"{path}.{key} is set to both {existing!r} and {value!r}")
    return result


class SpecMerger(KindMerger):
    """Default merge arithmetic for UnstructuredPolicy objects."""

    def merge(self, ancestor: Policy, descendant: Policy) -> Policy:
        parent, child = self._check(ancestor, descendant)
        if not parent.is_inherited():
            return self._merge_direct(child, parent, child)

        parent_spec = parent.spec
        spec = child.spec
        default = _overlay(parent_spec.get(_DEFAULT) or {}, spec.get(_DEFAULT) or {})
        override = _overlay(spec.get(_OVERRIDE) or {}, parent_spec.get(_OVERRIDE) or {})
        if default:
            spec[_DEFAULT] = default
        if override:
            spec[_OVERRIDE] = override
        return child.with_spec(spec)

    def merge_peers(self, first: Policy, second: Policy) -> Policy:
        winner, loser = self._check(first, second)
        if not winner.is_inherited():
            return self._merge_direct(winner, winner, loser)

        loser_spec = loser.spec
        spec = winner.spec
        for section in (_DEFAULT, _OVERRIDE):
            merged = _overlay(loser_spec.get(section) or {}, spec.get(section) or {})
            if merged:
                spec[section] = merged
        return winner.with_spec(spec)

    @staticmethod
    def _merge_direct(keep: UnstructuredPolicy, a: UnstructuredPolicy, b: UnstructuredPolicy) -> Policy:
        a_spec = a.spec
        b_spec = b.spec
        target_ref = keep.spec.get(_TARGET_REF)
        a_spec.pop(_TARGET_REF, None)
        b_spec.pop(_TARGET_REF, None)
        spec = _union(a_spec, b_spec, keep.merge_kind)
        if target_ref is not None:
            spec[_TARGET_REF] = target_ref
        return keep.with_spec(spec)

    @staticmethod
    def _check(a: Policy, b: Policy) -> tuple[UnstructuredPolicy, UnstructuredPolicy]:
        if not isinstance(a, UnstructuredPolicy) or not isinstance(b, UnstructuredPolicy):
            raise TypeError("SpecMerger only merges UnstructuredPolicy objects")
        if a.merge_kind != b.merge_kind:
            raise MergeConflictError(a.merge_kind, f"cannot merge with a policy of kind {b.merge_kind}")
        if a.is_inherited() != b.is_inherited():
            raise MergeConflictError(
                a.merge_kind,
                f"{a.namespace}/{a.name} and {b.namespace}/{b.name} disagree on inheritance",
            )
        return a, b


class MergerRegistry(PolicyMerger):
    """PolicyMerger dispatching to KindMergers registered per merge-kind."""

    def __init__(self, default: KindMerger | None = None) -> None:
        self._default = default or SpecMerger()
        self._mergers: dict[PolicyKindID, KindMerger] = {}

    def register(self, merge_kind: PolicyKindID, merger: KindMerger) -> None:
        self._mergers[merge_kind] = merger

    def merger_for(self, merge_kind: PolicyKindID) -> KindMerger:
        return self._mergers.get(merge_kind, self._default)

    def merge_same_kind(self, policies: Iterable[Policy]) -> PoliciesByKind:
        result: PoliciesByKind = {}
        for policy in sorted(policies, key=precedence_key):
            existing = result.get(policy.merge_kind)
            if existing is None:
                result[policy.merge_kind] = policy
            else:
                result[policy.merge_kind] = self.merger_for(policy.merge_kind).merge_peers(existing, policy)
        return result

    def merge_different_hierarchy(
        self,
        ancestor: Mapping[PolicyKindID, Policy] | None,
        specific: Mapping[PolicyKindID, Policy] | None,
    ) -> PoliciesByKind:
        result: PoliciesByKind = dict(ancestor or {})
        for merge_kind, policy in sorted((specific or {}).items()):
            parent = result.get(merge_kind)
            if parent is None:
                result[merge_kind] = policy
            else:
                result[merge_kind] = self.merger_for(merge_kind).merge(parent, policy)
        return result

    def merge_same_hierarchy(
        self,
        first: Mapping[PolicyKindID, Policy] | None,
        second: Mapping[PolicyKindID, Policy] | None,
    ) -> PoliciesByKind:
        result: PoliciesByKind = dict(first or {})
        for merge_kind, policy in sorted((second or {}).items()):
            existing = result.get(merge_kind)
            if existing is None:
                result[merge_kind] = policy
                continue
            a, b = sorted((existing, policy), key=precedence_key)
            result[merge_kind] = self.merger_for(merge_kind).merge_peers(a, b)
        return result
