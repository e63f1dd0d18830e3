"""Prometheus counters for graph assembly and policy resolution.

The core never starts an exporter; a host process that already serves the
default registry picks these up automatically.
"""

from __future__ import annotations

from prometheus_client import Counter

policies_attached_total = Counter(
    "gwpolicy_policies_attached_total",
    "Policies attached to a node of the resource graph.",
    ["target_kind"],
)

policies_dropped_total = Counter(
    "gwpolicy_policies_dropped_total",
    "Policies dropped because their target does not exist.",
    ["target_kind"],
)

connections_skipped_total = Counter(
    "gwpolicy_connections_skipped_total",
    "Connect operations skipped because an endpoint does not exist.",
    ["edge"],
)

merge_conflicts_total = Counter(
    "gwpolicy_merge_conflicts_total",
    "Nodes whose effective policies could not be merged.",
    ["node_kind"],
)
