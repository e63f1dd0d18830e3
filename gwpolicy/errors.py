"""Exception hierarchy for gwpolicy."""

from __future__ import annotations

from typing import Any


class GWPolicyError(Exception):
    """Base class for every error raised by gwpolicy."""


class MergeConflictError(GWPolicyError):
    """Raised by a merge capability when two policies cannot be reconciled."""

    def __init__(self, merge_kind: Any, reason: str) -> None:
        super().__init__(f"cannot merge policies of kind {merge_kind}: {reason}")
        self.merge_kind = merge_kind
        self.reason = reason


class PolicyResolutionError(GWPolicyError):
    """Raised when the effective policies of a single node cannot be computed.

    Wraps the underlying MergeConflictError so callers can tell which node
    failed without parsing messages.
    """

    def __init__(self, node_kind: str, node_id: Any, cause: MergeConflictError) -> None:
        super().__init__(f"failed to resolve effective policies for {node_kind} {node_id}: {cause}")
        self.node_kind = node_kind
        self.node_id = node_id
        self.cause = cause


class UpstreamResolutionError(GWPolicyError):
    """A node depends on another node whose effective policies failed.

    ``upstream_id`` names the failed Gateway or HTTPRoute.  Raised only in
    BEST_EFFORT mode, where the upstream failure was recorded instead of
    aborting the pass.
    """

    def __init__(self, upstream_kind: str, upstream_id: Any) -> None:
        super().__init__(f"depends on {upstream_kind} {upstream_id}, whose effective policies failed")
        self.upstream_kind = upstream_kind
        self.upstream_id = upstream_id
