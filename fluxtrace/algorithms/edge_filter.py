"""Threshold-based selection of incoming edges to expand."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from fluxtrace.algorithms.base import Contribution
from fluxtrace.algorithms.propagation import BranchState, edge_contribution, edge_weight
from fluxtrace.graph.view import IncomingEdge


def admissible_edges(
    state: BranchState,
    edges: Iterable[IncomingEdge],
    min_contribution: float,
) -> List[IncomingEdge]:
    """Select the incoming edges whose propagated contribution reaches the threshold.

    An edge of weight ``w`` is admitted iff
    ``state.contribution * w / state.influx >= min_contribution``. A node with
    zero influx admits nothing. The filter is monotone: raising
    ``min_contribution`` can only remove edges. Input order is preserved.

    Args:
        state: Branch state of the node being expanded.
        edges: The node's incoming edges.
        min_contribution: Inclusive lower bound on the propagated contribution.

    Returns:
        Admitted edges in input order.
    """
    return [edge for edge, _ in scored_edges(state, edges, min_contribution)]


def scored_edges(
    state: BranchState,
    edges: Iterable[IncomingEdge],
    min_contribution: float,
) -> List[Tuple[IncomingEdge, Contribution]]:
    """Like :func:`admissible_edges` but also return each edge's contribution."""
    if state.is_leaf:
        return []
    selected: List[Tuple[IncomingEdge, Contribution]] = []
    for edge in edges:
        candidate = edge_contribution(state, edge_weight(edge))
        if candidate >= min_contribution:
            selected.append((edge, candidate))
    return selected
