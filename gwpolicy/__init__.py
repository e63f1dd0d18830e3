"""gwpolicy -- Gateway API resource graph and hierarchical policy resolution.

Builds a typed graph of GatewayClasses, Namespaces, Gateways, HTTPRoutes,
Backends, ReferenceGrants and the policies attached to them, then computes
effective and inherited policies for every routable node.
"""

__version__ = "0.1.0"
