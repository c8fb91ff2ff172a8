"""Traversal algorithms: propagation, edge filtering, classification and the engine."""

from fluxtrace.algorithms.base import (
    Decision,
    EmitMode,
    InfluxOverflowError,
    InvalidThresholdError,
    MalformedWeightError,
    NodeNotFoundError,
)
from fluxtrace.algorithms.diagnostics import (
    DiagnosticSink,
    EventRecorder,
    PathLogger,
    TraversalEvent,
)
from fluxtrace.algorithms.edge_filter import admissible_edges
from fluxtrace.algorithms.propagation import BranchState, propagate, root_state
from fluxtrace.algorithms.terminal import classify
from fluxtrace.algorithms.traversal import TraversalEngine, traverse

__all__ = [
    "BranchState",
    "Decision",
    "DiagnosticSink",
    "EmitMode",
    "EventRecorder",
    "InfluxOverflowError",
    "InvalidThresholdError",
    "MalformedWeightError",
    "NodeNotFoundError",
    "PathLogger",
    "TraversalEngine",
    "TraversalEvent",
    "admissible_edges",
    "classify",
    "propagate",
    "root_state",
    "traverse",
]
