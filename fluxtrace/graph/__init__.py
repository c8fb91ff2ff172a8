"""Graph primitives and helpers.

This package provides the strict transfer graph `LedgerGraph`, the read-only
`LedgerView` the traversal consumes, and node-link serialization (`io`).
"""

from fluxtrace.graph.ledger_graph import LedgerGraph
from fluxtrace.graph.view import GraphView, IncomingEdge, LedgerView

__all__ = ["GraphView", "IncomingEdge", "LedgerGraph", "LedgerView"]
