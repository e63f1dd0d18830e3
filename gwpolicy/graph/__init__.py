"""Resource graph and policy resolution.

Provides the in-memory graph of Gateway API resources (GatewayClass,
Namespace, Gateway, HTTPRoute, Backend, ReferenceGrant) with policies
attached to them, and the effective/inherited policy passes over it.
"""

from gwpolicy.graph.diagnostics import Diagnostic, DiagnosticReason, DiagnosticSink
from gwpolicy.graph.effective import NodeFailure, ResolutionReport
from gwpolicy.graph.identity import NodeKind, ResourceID
from gwpolicy.graph.model import ResourceModel
from gwpolicy.graph.nodes import (
    BackendNode,
    GatewayClassNode,
    GatewayNode,
    HTTPRouteNode,
    NamespaceNode,
    PolicyNode,
    ReferenceGrantNode,
)

__all__ = [
    "BackendNode",
    "Diagnostic",
    "DiagnosticReason",
    "DiagnosticSink",
    "GatewayClassNode",
    "GatewayNode",
    "HTTPRouteNode",
    "NamespaceNode",
    "NodeFailure",
    "NodeKind",
    "PolicyNode",
    "ReferenceGrantNode",
    "ResolutionReport",
    "ResourceID",
    "ResourceModel",
]
