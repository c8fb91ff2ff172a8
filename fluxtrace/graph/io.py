"""Serialization helpers for ``LedgerGraph``.

Graphs are exchanged as node-link dictionaries:

```yaml
graph: {name: sample}
nodes:
  - id: w1
    labels: [Address]
    attr: {hash: "0xabc"}
links:
  - source: w2
    target: w1
    key: 0
    attr: {amount: 10}
```

Links reference nodes by id. For hand-written files, any extra top-level key
on a node or link entry (e.g. ``hash`` or ``amount``) is merged into ``attr``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from fluxtrace.config import DEFAULT_CONFIG, TraversalConfig
from fluxtrace.graph.ledger_graph import LedgerGraph
from fluxtrace.logging import get_logger

logger = get_logger(__name__)

_NODE_FIELDS = {"id", "labels", "attr"}
_LINK_FIELDS = {"source", "target", "key", "attr"}


def _normalize_keys(data: Dict[Any, Any]) -> Dict[str, Any]:
    """Return ``data`` with string keys.

    YAML 1.1 turns keys such as ``yes``/``on`` into booleans; they become
    ``"True"``/``"False"`` here instead of leaking into attribute names.
    """
    return {str(key): value for key, value in data.items()}


def graph_to_node_link(graph: LedgerGraph) -> Dict[str, Any]:
    """Convert a LedgerGraph into a JSON-safe node-link dictionary.

    Labels are written as a sorted list; all other node attributes go under
    ``attr``.

    Args:
        graph: The graph to convert.

    Returns:
        Dict with ``graph``, ``nodes`` and ``links`` keys.
    """
    labels_attr = graph.config.labels_attr
    nodes: List[Dict[str, Any]] = []
    for node_id, attrs in graph.get_nodes().items():
        attr = {k: v for k, v in attrs.items() if k != labels_attr}
        nodes.append(
            {
                "id": node_id,
                "labels": sorted(graph.node_labels(node_id)),
                "attr": attr,
            }
        )

    return {
        "graph": dict(graph.graph),
        "nodes": nodes,
        "links": [
            {"source": src, "target": dst, "key": edge_id, "attr": dict(edge_attrs)}
            for edge_id, (src, dst, _, edge_attrs) in graph.get_edges().items()
        ],
    }


def node_link_to_graph(
    data: Dict[str, Any], config: Optional[TraversalConfig] = None
) -> LedgerGraph:
    """Build a LedgerGraph from its node-link dictionary.

    Args:
        data: Mapping with optional ``graph`` and required ``nodes``/``links``.
        config: Attribute naming for the new graph.

    Returns:
        The reconstructed graph.

    Raises:
        ValueError: If the structure is invalid, a node is duplicated, or a
            link references an unknown node.
    """
    if not isinstance(data, dict):
        raise ValueError("Graph data must be a mapping with 'nodes' and 'links'.")
    graph_attrs = _normalize_keys(data.get("graph") or {})
    graph = LedgerGraph(config=config or DEFAULT_CONFIG, **graph_attrs)

    for entry in data.get("nodes") or []:
        if not isinstance(entry, dict) or "id" not in entry:
            raise ValueError(f"Node entry must be a mapping with an 'id': {entry!r}")
        labels = entry.get("labels") or []
        if isinstance(labels, str):
            labels = [labels]
        attr = _normalize_keys(entry.get("attr") or {})
        for extra, value in entry.items():
            if extra not in _NODE_FIELDS:
                attr.setdefault(str(extra), value)
        graph.add_node(entry["id"], labels=labels, **attr)

    for entry in data.get("links") or []:
        if not isinstance(entry, dict) or "source" not in entry or "target" not in entry:
            raise ValueError(
                f"Link entry must be a mapping with 'source' and 'target': {entry!r}"
            )
        attr = _normalize_keys(entry.get("attr") or {})
        for extra, value in entry.items():
            if extra not in _LINK_FIELDS:
                attr.setdefault(str(extra), value)
        graph.add_edge(entry["source"], entry["target"], key=entry.get("key"), **attr)

    logger.debug(
        "Built graph with %d nodes and %d edges",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph


def load_graph(
    path: Union[str, Path], config: Optional[TraversalConfig] = None
) -> LedgerGraph:
    """Load a graph from a YAML (``.yaml``/``.yml``) or JSON file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the content is not a valid node-link document.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    logger.info(f"Loading graph from: {path}")
    return node_link_to_graph(data or {}, config=config)


def dump_graph(graph: LedgerGraph, path: Union[str, Path]) -> None:
    """Write ``graph`` to ``path`` as YAML or JSON depending on the suffix."""
    path = Path(path)
    data = graph_to_node_link(graph)
    if path.suffix.lower() == ".json":
        path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
