"""Non-fatal diagnostics collected while the graph is assembled.

A DiagnosticSink is handed to the ResourceModel by its caller and
accumulates one entry per dropped policy or skipped connection.  Nothing is
kept in module state, so two models built in one process never share
diagnostics.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum

from gwpolicy.graph.identity import ResourceID
from gwpolicy.observability.logging import get_logger
from gwpolicy.observability.metrics import connections_skipped_total, policies_dropped_total

_logger = get_logger("graph.diagnostics")


class DiagnosticReason(StrEnum):
    POLICY_TARGET_MISSING = "policy_target_missing"
    POLICY_TARGET_UNSUPPORTED = "policy_target_unsupported"
    CONNECTION_ENDPOINT_MISSING = "connection_endpoint_missing"


@dataclass(frozen=True)
class Diagnostic:
    """One structural warning.

    ``resource`` names the object whose processing was skipped (the dropped
    policy's id, or the id of the connect operation's source).  ``missing``
    is the identity that could not be found.
    """

    reason: DiagnosticReason
    resource: str
    missing: ResourceID | None
    message: str


class DiagnosticSink:
    """Ordered, append-only collection of Diagnostics."""

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[Diagnostic]:
        return list(self._entries)

    def policy_dropped(self, policy: ResourceID, target: ResourceID | None, message: str) -> None:
        reason = DiagnosticReason.POLICY_TARGET_MISSING if target is not None else DiagnosticReason.POLICY_TARGET_UNSUPPORTED
        self._entries.append(Diagnostic(reason, str(policy), target, message))
        policies_dropped_total.labels(target_kind=str(target.node_kind) if target else "unsupported").inc()
        _logger.warning("policy_dropped", policy=str(policy), target=str(target) if target else None, detail=message)

    def connection_skipped(self, edge: str, source: ResourceID, missing: ResourceID) -> None:
        message = f"{missing.node_kind} {missing} does not exist; {edge} edge not created"
        self._entries.append(Diagnostic(DiagnosticReason.CONNECTION_ENDPOINT_MISSING, str(source), missing, message))
        connections_skipped_total.labels(edge=edge).inc()
        _logger.warning("connection_skipped", edge=edge, source=str(source), missing=str(missing))
