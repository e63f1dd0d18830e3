"""Policy capability: the Policy contract and pluggable merge arithmetic.

Submodules:
    base          -- Policy, PolicyMerger, TargetRef, PolicyKindID.
    unstructured  -- UnstructuredPolicy over a decoded Kubernetes object.
    merger        -- MergerRegistry, KindMerger, SpecMerger.
"""

from gwpolicy.policy.base import PoliciesByKind, Policy, PolicyKindID, PolicyMerger, TargetRef, precedence_key
from gwpolicy.policy.merger import KindMerger, MergerRegistry, SpecMerger
from gwpolicy.policy.unstructured import UnstructuredPolicy, is_inherited_crd

__all__ = [
    "KindMerger",
    "MergerRegistry",
    "PoliciesByKind",
    "Policy",
    "PolicyKindID",
    "PolicyMerger",
    "SpecMerger",
    "TargetRef",
    "UnstructuredPolicy",
    "is_inherited_crd",
    "precedence_key",
]
