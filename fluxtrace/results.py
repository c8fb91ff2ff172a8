"""Result records produced by a traversal.

``NodeRef`` is what the traversal yields. ``TraversalSummary`` collects a fully
consumed traversal into a JSON-safe document for the CLI and for callers that
want to persist a run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, Optional, Tuple

from fluxtrace.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class NodeRef:
    """A node emitted by the traversal, with the path it was reached on.

    The same node can be emitted more than once when several paths reach it;
    each emission carries its own path and contribution.

    Attributes:
        node: Node identifier in the graph.
        key: External lookup key of the node, if it has one.
        labels: Category labels of the node.
        contribution: Fraction of the start node's influence on this path.
        depth: Number of edges between the start node and ``node``.
        edges: Edge keys walked from the start node, in order.
        terminal: Whether the node carries the terminal label.
    """

    node: Hashable
    key: Optional[str]
    labels: FrozenSet[str]
    contribution: float
    depth: int
    edges: Tuple[Hashable, ...] = ()
    terminal: bool = False

    def __post_init__(self) -> None:
        """Validate numeric fields.

        Raises:
            ValueError: If ``contribution`` is not finite or ``depth`` disagrees
                with the number of edges.
        """
        if not math.isfinite(self.contribution):
            raise ValueError(f"NodeRef.contribution must be finite: {self.contribution!r}")
        if self.depth != len(self.edges):
            raise ValueError(
                f"NodeRef.depth={self.depth} does not match {len(self.edges)} edges"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-safe dictionary (labels sorted, ids stringified)."""
        return {
            "node": _jsonable(self.node),
            "key": self.key,
            "labels": sorted(self.labels),
            "contribution": self.contribution,
            "depth": self.depth,
            "edges": [_jsonable(e) for e in self.edges],
            "terminal": self.terminal,
        }


def _jsonable(value: Hashable) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


@dataclass
class TraversalSummary:
    """Collected results of one traversal together with its parameters.

    Attributes:
        start_key: Lookup key the traversal started from.
        min_contribution: Threshold used for edge admission.
        terminal_label: Label that stopped expansion.
        results: Emitted node references in emission order.
    """

    start_key: str
    min_contribution: float
    terminal_label: str
    results: List[NodeRef] = field(default_factory=list)

    @classmethod
    def collect(
        cls,
        refs: Iterable[NodeRef],
        start_key: str,
        min_contribution: float,
        terminal_label: str,
    ) -> "TraversalSummary":
        """Drain ``refs`` into a new summary."""
        summary = cls(start_key, min_contribution, terminal_label, list(refs))
        logger.debug(
            "Collected %d results (%d terminal) from '%s'",
            len(summary.results),
            len(summary.terminals()),
            start_key,
        )
        return summary

    def terminals(self) -> List[NodeRef]:
        """Return only the results carrying the terminal label."""
        return [ref for ref in self.results if ref.terminal]

    def contribution_by_node(self) -> Dict[Hashable, float]:
        """Sum contributions per node over all paths that reached it.

        Paths may overlap, so the sum is an upper bound on the share of the
        start node's influence attributable to a node, not an exact split.
        """
        totals: Dict[Hashable, float] = {}
        for ref in self.results:
            totals[ref.node] = totals.get(ref.node, 0.0) + ref.contribution
        return totals

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-safe dictionary of parameters, counts and results."""
        return {
            "parameters": {
                "start_key": self.start_key,
                "min_contribution": self.min_contribution,
                "terminal_label": self.terminal_label,
            },
            "counts": {
                "results": len(self.results),
                "terminals": len(self.terminals()),
                "distinct_nodes": len({ref.node for ref in self.results}),
            },
            "results": [ref.to_dict() for ref in self.results],
        }
