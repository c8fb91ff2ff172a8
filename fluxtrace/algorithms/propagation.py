"""Contribution propagation along a traversal path.

Every branch of the traversal carries a ``BranchState``. The start node owns
the whole influence (contribution 1.0). A node reached from ``parent`` through
an incoming edge of weight ``w`` receives::

    contribution(node) = contribution(parent) * w / influx(parent)

where ``influx(parent)`` is the total weight of all edges ending at the parent,
measured when the parent was visited. Each node's own influx is measured here
and cached in its state for the next expansion step.

All functions are pure: they read the graph view and return new values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Hashable, Iterable, Optional, Sequence

from fluxtrace.algorithms.base import (
    ROOT_CONTRIBUTION,
    Contribution,
    InfluxOverflowError,
    MalformedWeightError,
)
from fluxtrace.graph.view import GraphView, IncomingEdge

Path = Sequence[IncomingEdge]


@dataclass(frozen=True, slots=True)
class BranchState:
    """Per-path state of a visited node.

    Attributes:
        contribution: Fraction of the start node's influence on this path.
        influx: Sum of incoming edge weights at the node when visited.
    """

    contribution: Contribution
    influx: float

    @property
    def is_leaf(self) -> bool:
        """True when the node has no incoming weight to expand through."""
        return self.influx <= 0.0


def edge_weight(edge: IncomingEdge) -> float:
    """Return the edge's weight as a float.

    Raises:
        MalformedWeightError: If the weight is missing, boolean, not a real
            number, NaN, infinite, or negative.
    """
    weight = edge.weight
    if isinstance(weight, bool) or not isinstance(weight, Real):
        raise MalformedWeightError(edge.key, weight)
    value = float(weight)
    if not math.isfinite(value) or value < 0.0:
        raise MalformedWeightError(edge.key, weight)
    return value


def measure_influx(edges: Iterable[IncomingEdge]) -> float:
    """Sum the weights of ``edges``, validating each one.

    Returns:
        Total incoming weight; 0.0 for no edges.

    Raises:
        MalformedWeightError: On the first malformed weight.
        InfluxOverflowError: If the weights sum past the float range.
    """
    edges = list(edges)
    weights = [edge_weight(edge) for edge in edges]
    try:
        influx = math.fsum(weights)
    except OverflowError:
        raise InfluxOverflowError([edge.key for edge in edges]) from None
    if not math.isfinite(influx):
        raise InfluxOverflowError([edge.key for edge in edges])
    return influx


def edge_contribution(parent: BranchState, weight: float) -> Contribution:
    """Contribution passed through one incoming edge of the parent's node.

    Returns 0.0 instead of dividing when the parent has no influx.
    """
    if parent.influx <= 0.0:
        return 0.0
    return parent.contribution * weight / parent.influx


def path_contribution(path: Path, parent: Optional[BranchState]) -> Contribution:
    """Contribution of the node at the end of ``path``.

    Only the last edge and the parent state are needed; the rest of the path
    is already folded into ``parent``.
    """
    if not path or parent is None:
        return ROOT_CONTRIBUTION
    return edge_contribution(parent, edge_weight(path[-1]))


def propagate(
    view: GraphView,
    node: Hashable,
    path: Path,
    parent: Optional[BranchState],
    edges: Optional[Sequence[IncomingEdge]] = None,
) -> BranchState:
    """Compute the branch state of ``node`` reached through ``path``.

    Args:
        view: Read-only graph access.
        node: The node at the end of ``path``.
        path: Incoming edges walked from the start node; empty for the root.
        parent: State of the previous node on the path; None for the root.
        edges: The node's incoming edges if the caller already fetched them.

    Returns:
        The node's ``BranchState``.

    Raises:
        MalformedWeightError: If an incoming weight of ``node`` is malformed.
    """
    contribution = path_contribution(path, parent)
    if edges is None:
        edges = view.incoming_edges(node)
    influx = measure_influx(edges)
    return BranchState(contribution=contribution, influx=influx)


def root_state(
    view: GraphView,
    node: Hashable,
    edges: Optional[Sequence[IncomingEdge]] = None,
) -> BranchState:
    """Branch state of the start node."""
    return propagate(view, node, (), None, edges)
