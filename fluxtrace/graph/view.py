"""Read-only graph access used by the traversal.

The traversal engine never touches a concrete graph. It talks to a
``GraphView``: anything that can resolve a start node by ``(category, key)``,
report a node's labels and list its incoming weighted edges. ``LedgerView``
implements the protocol over a ``LedgerGraph``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    FrozenSet,
    Hashable,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
    Tuple,
)

from fluxtrace.graph.ledger_graph import LedgerGraph

__all__ = ["GraphView", "IncomingEdge", "LedgerView"]


class IncomingEdge(NamedTuple):
    """One edge ending at the node being expanded.

    Attributes:
        key: Unique edge identifier; the unit of the per-path uniqueness rule.
        source: Node the edge starts at; the traversal continues there.
        target: Node the edge ends at.
        weight: Raw weight as stored. Validated by the propagator.
    """

    key: Hashable
    source: Hashable
    target: Hashable
    weight: Any


class GraphView(Protocol):
    """Read-only accessor the traversal engine depends on."""

    def find_node_by_key(self, category: str, key: str) -> Optional[Hashable]: ...

    def incoming_edges(self, node: Hashable) -> Sequence[IncomingEdge]: ...

    def labels(self, node: Hashable) -> FrozenSet[str]: ...

    def node_key(self, node: Hashable) -> Optional[str]: ...


@dataclass(frozen=True)
class LedgerView:
    """Snapshot view over a ``LedgerGraph``.

    The ``(label, key)`` lookup index is built once at construction. The view
    assumes the graph is not mutated while it is in use; a traversal run
    against a mutated graph sees whatever the index captured.

    Example:
        ```python
        view = LedgerView(graph)
        node = view.find_node_by_key("Address", "0xabc")
        ```

    Attributes:
        graph: The underlying graph.
    """

    graph: LedgerGraph
    _index: Dict[Tuple[str, str], Hashable] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index: Dict[Tuple[str, str], Hashable] = {}
        for node in self.graph.nodes:
            key = self.graph.node_key(node)
            if key is None:
                continue
            for label in self.graph.node_labels(node):
                # First node wins when two nodes share a (label, key) pair
                index.setdefault((label, key), node)
        object.__setattr__(self, "_index", index)

    def find_node_by_key(self, category: str, key: str) -> Optional[Hashable]:
        """Return the node labelled ``category`` whose lookup key is ``key``."""
        return self._index.get((category, str(key)))

    def incoming_edges(self, node: Hashable) -> Sequence[IncomingEdge]:
        """Return the edges ending at ``node`` with their raw weights."""
        weight_attr = self.graph.config.weight_attr
        return [
            IncomingEdge(key, src, dst, attr.get(weight_attr))
            for src, dst, key, attr in self.graph.incoming(node)
        ]

    def labels(self, node: Hashable) -> FrozenSet[str]:
        """Return the label set of ``node``."""
        return self.graph.node_labels(node)

    def node_key(self, node: Hashable) -> Optional[str]:
        """Return the external lookup key of ``node``."""
        return self.graph.node_key(node)
