"""Strict multi-directed transfer graph.

`LedgerGraph` extends `networkx.MultiDiGraph` to hold the node categories,
node lookup keys and edge amounts the traversal works on. Like a ledger it
only accepts explicitly declared accounts: edges never create nodes, edge keys
are unique across the whole graph, and every invalid operation raises
``ValueError``.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, Optional, Tuple

import networkx as nx

from fluxtrace.config import DEFAULT_CONFIG, TraversalConfig

NodeID = Hashable
EdgeID = Hashable
AttrDict = Dict[str, Any]
EdgeTuple = Tuple[NodeID, NodeID, EdgeID, AttrDict]


class LedgerGraph(nx.MultiDiGraph):
    """A multi-directed graph of labelled nodes and weighted transfer edges.

    This class enforces:
      - No automatic creation of missing nodes when adding an edge.
      - No duplicate nodes and no duplicate edge keys.
      - Removing non-existent nodes or edges raises ValueError.
      - Node labels are stored as a ``frozenset`` under ``config.labels_attr``.

    Edge keys default to a monotonically increasing integer. Parallel edges
    between the same pair of nodes are allowed and distinguished by key.
    """

    def __init__(self, *args, config: Optional[TraversalConfig] = None, **kwargs) -> None:
        """Initialize a LedgerGraph.

        Args:
            *args: Positional arguments forwarded to the MultiDiGraph constructor.
            config: Attribute naming; defaults to ``DEFAULT_CONFIG``.
            **kwargs: Graph attributes forwarded to the MultiDiGraph constructor.
        """
        self.config: TraversalConfig = config or DEFAULT_CONFIG
        self._edges: Dict[EdgeID, EdgeTuple] = {}
        self._next_edge_id: int = 0
        super().__init__(*args, **kwargs)

    def new_edge_key(self, u: NodeID, v: NodeID, key: Optional[int] = None) -> int:  # type: ignore[override]
        """Return a new unique integer edge key (``u``, ``v`` and ``key`` are ignored)."""
        next_edge_id = self._next_edge_id
        self._next_edge_id += 1
        return next_edge_id

    #
    # Node management
    #
    def add_node(
        self,
        node_for_adding: NodeID,
        labels: Optional[Iterable[str]] = None,
        **attr: Any,
    ) -> None:
        """Add a single node, disallowing duplicates.

        Args:
            node_for_adding: The node to add.
            labels: Category labels of the node.
            **attr: Other node attributes, e.g. the lookup key.

        Raises:
            ValueError: If the node already exists or a label is not a string.
        """
        if node_for_adding in self:
            raise ValueError(f"Node '{node_for_adding}' already exists in this graph.")
        label_set = frozenset(labels or ())
        for label in label_set:
            if not isinstance(label, str) or not label:
                raise ValueError(
                    f"Node '{node_for_adding}' has an invalid label {label!r}."
                )
        attr[self.config.labels_attr] = label_set
        super().add_node(node_for_adding, **attr)

    def remove_node(self, n: NodeID) -> None:
        """Remove a single node and all incident edges.

        Raises:
            ValueError: If the node does not exist in the graph.
        """
        if n not in self:
            raise ValueError(f"Node '{n}' does not exist.")
        to_delete = [
            e_id for e_id, (s, t, _, _) in self._edges.items() if s == n or t == n
        ]
        for e_id in to_delete:
            del self._edges[e_id]
        super().remove_node(n)

    #
    # Edge management
    #
    def add_edge(  # pyright: ignore[reportIncompatibleMethodOverride]
        self,
        u_for_edge: NodeID,
        v_for_edge: NodeID,
        key: Optional[EdgeID] = None,
        **attr: Any,
    ) -> EdgeID:
        """Add a directed transfer edge from ``u_for_edge`` to ``v_for_edge``.

        The weight is stored as given; the traversal validates it when the
        target node is visited, so malformed data stays local to one branch.

        Args:
            u_for_edge: The source node. Must exist in the graph.
            v_for_edge: The target node. Must exist in the graph.
            key: The unique edge key. If None, a new key is generated.
            **attr: Edge attributes, usually including the weight.

        Returns:
            The key of the new edge.

        Raises:
            ValueError: If either node does not exist, or if the key is already in use.
        """
        if u_for_edge not in self:
            raise ValueError(f"Source node '{u_for_edge}' does not exist.")
        if v_for_edge not in self:
            raise ValueError(f"Target node '{v_for_edge}' does not exist.")

        if key is None:
            key = self.new_edge_key(u_for_edge, v_for_edge)
        else:
            if key in self._edges:
                raise ValueError(f"Edge with id '{key}' already exists.")
            if isinstance(key, int) and key >= self._next_edge_id:
                self._next_edge_id = key + 1

        super().add_edge(u_for_edge, v_for_edge, key=key, **attr)
        self._edges[key] = (
            u_for_edge,
            v_for_edge,
            key,
            self[u_for_edge][v_for_edge][key],  # pyright: ignore[reportArgumentType]
        )
        return key

    def add_transfer(
        self, source: NodeID, target: NodeID, amount: Any, key: Optional[EdgeID] = None
    ) -> EdgeID:
        """Add an edge whose weight is stored under ``config.weight_attr``."""
        return self.add_edge(source, target, key=key, **{self.config.weight_attr: amount})

    def remove_edge_by_id(self, key: EdgeID) -> None:
        """Remove a directed edge by its unique key.

        Raises:
            ValueError: If no edge with this key exists in the graph.
        """
        if key not in self._edges:
            raise ValueError(f"Edge with id='{key}' not found.")
        src_node, dst_node, _, _ = self._edges.pop(key)
        super().remove_edge(src_node, dst_node, key=key)

    #
    # Convenience methods
    #
    def get_nodes(self) -> Dict[NodeID, AttrDict]:
        """Return all nodes and their attributes as a dictionary."""
        return dict(self.nodes(data=True))

    def get_edges(self) -> Dict[EdgeID, EdgeTuple]:
        """Return a mapping of edge key to ``(source, target, key, attributes)``."""
        return self._edges

    def get_edge_attr(self, key: EdgeID) -> AttrDict:
        """Return the attribute dictionary of a specific edge.

        Raises:
            ValueError: If no edge with this key is found.
        """
        if key not in self._edges:
            raise ValueError(f"Edge with id='{key}' not found.")
        return self._edges[key][3]

    def node_labels(self, node: NodeID) -> FrozenSet[str]:
        """Return the label set of ``node``.

        Raises:
            ValueError: If the node does not exist.
        """
        if node not in self:
            raise ValueError(f"Node '{node}' does not exist.")
        return self.nodes[node].get(self.config.labels_attr, frozenset())

    def node_key(self, node: NodeID) -> Optional[str]:
        """Return the external lookup key of ``node``, or None if it has none."""
        if node not in self:
            raise ValueError(f"Node '{node}' does not exist.")
        value = self.nodes[node].get(self.config.key_attr)
        return None if value is None else str(value)

    def incoming(self, node: NodeID) -> List[EdgeTuple]:
        """List the edges ending at ``node`` in insertion order.

        Returns:
            ``(source, node, key, attributes)`` tuples; empty for a node
            without incoming edges.

        Raises:
            ValueError: If the node does not exist.
        """
        if node not in self:
            raise ValueError(f"Node '{node}' does not exist.")
        return [
            (src, node, key, attr)
            for src, edges in self.pred[node].items()
            for key, attr in edges.items()
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Return the node-link dictionary of this graph (see ``fluxtrace.graph.io``)."""
        # Import here to avoid circular import
        from fluxtrace.graph.io import graph_to_node_link

        return graph_to_node_link(self)
