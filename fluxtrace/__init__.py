"""fluxtrace: flow-attributed reachability over weighted transfer graphs.

Starting from one node, fluxtrace walks incoming edges depth-first and tracks
which fraction of the start node's influence reaches every node along each
path. Branches whose propagated contribution drops below a threshold are
pruned, and nodes carrying a terminal label end their branch.

Primary API:
    traverse() - Lazy depth-first traversal yielding NodeRef records
    LedgerGraph - Strict multi-directed graph of labelled nodes and transfers
    LedgerView - Read-only view the traversal runs against
    load_graph() - Read a graph from a YAML/JSON node-link file

Example:
    from fluxtrace import LedgerGraph, LedgerView, traverse

    g = LedgerGraph()
    g.add_node("w", labels=["Address"], hash="0xw")
    g.add_node("x", labels=["Address", "Exchange"], hash="0xx")
    g.add_transfer("x", "w", 10)

    for ref in traverse(LedgerView(g), "0xw", 0.1, "Exchange"):
        print(ref.node, ref.contribution)
"""

from __future__ import annotations

from fluxtrace import cli, logging
from fluxtrace._version import __version__
from fluxtrace.algorithms.base import (
    Decision,
    EmitMode,
    InfluxOverflowError,
    InvalidThresholdError,
    MalformedWeightError,
    NodeNotFoundError,
)
from fluxtrace.algorithms.diagnostics import EventRecorder, PathLogger, TraversalEvent
from fluxtrace.algorithms.propagation import BranchState
from fluxtrace.algorithms.traversal import TraversalEngine, traverse
from fluxtrace.config import DEFAULT_CONFIG, TraversalConfig
from fluxtrace.graph.io import dump_graph, load_graph, node_link_to_graph
from fluxtrace.graph.ledger_graph import LedgerGraph
from fluxtrace.graph.view import GraphView, IncomingEdge, LedgerView
from fluxtrace.results import NodeRef, TraversalSummary

__all__ = [
    # Version
    "__version__",
    # Traversal (primary API)
    "traverse",
    "TraversalEngine",
    "BranchState",
    "Decision",
    "EmitMode",
    # Results
    "NodeRef",
    "TraversalSummary",
    # Graph
    "LedgerGraph",
    "LedgerView",
    "GraphView",
    "IncomingEdge",
    "load_graph",
    "dump_graph",
    "node_link_to_graph",
    # Configuration
    "TraversalConfig",
    "DEFAULT_CONFIG",
    # Diagnostics
    "TraversalEvent",
    "PathLogger",
    "EventRecorder",
    # Errors
    "NodeNotFoundError",
    "InvalidThresholdError",
    "MalformedWeightError",
    "InfluxOverflowError",
    # Utilities
    "cli",
    "logging",
]
