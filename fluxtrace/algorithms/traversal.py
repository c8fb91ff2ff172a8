"""Depth-first, contribution-pruned traversal over incoming edges.

Starting from one node, the engine walks edges backwards (from a node to the
sources of the edges ending at it), carrying a ``BranchState`` per path.
An incoming edge is expanded only while the contribution it would carry stays
at or above ``min_contribution``. Nodes with the terminal label are emitted
and not expanded past. Within one path an edge is used at most once; nodes
may repeat.

Notes:
    The traversal is a generator: no node is visited before the consumer asks
    for the next result, and abandoning or closing the iterator stops the
    expansion. Parameter validation, the start-node lookup and the start
    node's influx are evaluated eagerly by :func:`traverse`, so those errors
    surface before anything is emitted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import islice
from numbers import Real
from typing import FrozenSet, Hashable, Iterator, List, Optional, Sequence, Tuple, Union

from fluxtrace.algorithms.base import (
    Decision,
    EmitMode,
    InvalidThresholdError,
    MalformedWeightError,
    NodeNotFoundError,
)
from fluxtrace.algorithms.diagnostics import DiagnosticSink, TraversalEvent
from fluxtrace.algorithms.edge_filter import admissible_edges
from fluxtrace.algorithms.propagation import (
    BranchState,
    path_contribution,
    propagate,
    root_state,
)
from fluxtrace.algorithms.terminal import classify
from fluxtrace.config import DEFAULT_CONFIG, TraversalConfig
from fluxtrace.graph.view import GraphView, IncomingEdge
from fluxtrace.logging import get_logger
from fluxtrace.results import NodeRef

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Branch:
    """A pending branch on the traversal stack.

    ``used`` is the set of edge keys on ``path``; children get a new set, so
    sibling branches never see each other's edges.
    """

    node: Hashable
    path: Tuple[IncomingEdge, ...]
    parent: Optional[BranchState]
    used: FrozenSet[Hashable]

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def edge_keys(self) -> Tuple[Hashable, ...]:
        return tuple(edge.key for edge in self.path)


class TraversalEngine:
    """Explicit-stack depth-first search emitting ``NodeRef``s in pre-order.

    Args:
        view: Read-only graph access.
        min_contribution: Inclusive admission threshold for edges.
        terminal_label: Label that makes a node a result and stops expansion.
        emit: Which visited nodes are yielded.
        max_depth: Optional bound on path length; nodes at this depth are
            emitted but not expanded.
        sink: Optional diagnostic sink.
    """

    def __init__(
        self,
        view: GraphView,
        min_contribution: float,
        terminal_label: str,
        emit: EmitMode = EmitMode.ALL,
        max_depth: Optional[int] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> None:
        self.view = view
        self.min_contribution = float(min_contribution)
        self.terminal_label = terminal_label
        self.emit = emit
        self.max_depth = max_depth
        self.sink = sink

    def _notify(self, kind, branch: Optional[_Branch] = None, **values) -> None:
        if self.sink is None:
            return
        contribution = values.pop("contribution", None)
        influx = values.pop("influx", None)
        if branch is None:
            event = TraversalEvent(kind, detail=values)
        else:
            event = TraversalEvent(
                kind,
                node=branch.node,
                depth=branch.depth,
                path=branch.edge_keys,
                contribution=contribution,
                influx=influx,
                detail=values,
            )
        self.sink(event)

    def _node_ref(self, branch: _Branch, contribution: float, terminal: bool) -> NodeRef:
        return NodeRef(
            node=branch.node,
            key=self.view.node_key(branch.node),
            labels=frozenset(self.view.labels(branch.node)),
            contribution=contribution,
            depth=branch.depth,
            edges=branch.edge_keys,
            terminal=terminal,
        )

    def run(
        self,
        start: Hashable,
        start_state: BranchState,
        start_edges: Optional[Sequence[IncomingEdge]] = None,
    ) -> Iterator[NodeRef]:
        """Yield the nodes reachable from ``start``.

        Args:
            start: The start node.
            start_state: Branch state of ``start`` (see ``root_state``).
            start_edges: Incoming edges of ``start`` that ``start_state`` was
                measured over; fetched from the view when omitted.

        Yields:
            ``NodeRef`` per emitted visit, depth-first pre-order.
        """
        stack: List[_Branch] = [_Branch(start, (), None, frozenset())]
        visited = 0
        emitted = 0
        try:
            while stack:
                branch = stack.pop()
                visited += 1
                labels = self.view.labels(branch.node)
                decision = classify(labels, self.terminal_label)
                contribution = path_contribution(branch.path, branch.parent)
                self._notify("visit", branch, contribution=contribution)

                if decision is Decision.RESULT_AND_PRUNE:
                    self._notify("terminal", branch, contribution=contribution)
                    emitted += 1
                    yield self._node_ref(branch, contribution, terminal=True)
                    continue

                if self.emit == EmitMode.ALL:
                    emitted += 1
                    yield self._node_ref(branch, contribution, terminal=False)

                if self.max_depth is not None and branch.depth >= self.max_depth:
                    self._notify("depth_limit", branch, contribution=contribution)
                    continue

                if branch.parent is None:
                    if start_edges is None:
                        start_edges = self.view.incoming_edges(branch.node)
                    incoming = start_edges
                    state = start_state
                else:
                    incoming = self.view.incoming_edges(branch.node)
                    try:
                        state = propagate(
                            self.view, branch.node, branch.path, branch.parent, incoming
                        )
                    except MalformedWeightError as exc:
                        logger.warning(
                            "Aborting branch at node %s (path %s): %s",
                            branch.node,
                            list(branch.edge_keys),
                            exc,
                        )
                        self._notify(
                            "branch_aborted",
                            branch,
                            contribution=contribution,
                            error=str(exc),
                        )
                        continue

                logger.debug(
                    "contribution: %s influx: %s node: %s key: %s",
                    state.contribution,
                    state.influx,
                    branch.node,
                    self.view.node_key(branch.node),
                )
                if state.is_leaf:
                    self._notify(
                        "leaf", branch, contribution=state.contribution, influx=0.0
                    )
                    continue

                children = [
                    edge
                    for edge in admissible_edges(state, incoming, self.min_contribution)
                    if edge.key not in branch.used
                ]
                self._notify(
                    "expand",
                    branch,
                    contribution=state.contribution,
                    influx=state.influx,
                    children=len(children),
                )
                # Reverse so the first admitted edge is explored first
                for edge in reversed(children):
                    stack.append(
                        _Branch(
                            node=edge.source,
                            path=branch.path + (edge,),
                            parent=state,
                            used=branch.used | {edge.key},
                        )
                    )
        finally:
            logger.debug(
                "Traversal from %s stopped: %d visited, %d emitted, %d pending",
                start,
                visited,
                emitted,
                len(stack),
            )
            self._notify(
                "finished",
                visited=visited,
                emitted=emitted,
                pending=len(stack),
            )


def _check_threshold(min_contribution: float) -> float:
    if isinstance(min_contribution, bool) or not isinstance(min_contribution, Real):
        raise InvalidThresholdError(
            f"min_contribution must be a number, got {min_contribution!r}"
        )
    try:
        value = float(min_contribution)
    except OverflowError:
        # Integers beyond the float range
        value = math.inf if min_contribution > 0 else -math.inf
    if math.isnan(value) or value < 0.0:
        raise InvalidThresholdError(
            f"min_contribution must be non-negative, got {min_contribution!r}"
        )
    return value


def _check_emit(emit: Union[EmitMode, str, int]) -> EmitMode:
    if isinstance(emit, EmitMode):
        return emit
    if isinstance(emit, str):
        try:
            return EmitMode.from_string(emit)
        except ValueError as exc:
            raise InvalidThresholdError(str(exc)) from None
    if isinstance(emit, int) and not isinstance(emit, bool):
        if emit in {mode.value for mode in EmitMode}:
            return EmitMode(emit)
    raise InvalidThresholdError(f"Invalid emit mode {emit!r}")


def _check_bound(name: str, value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidThresholdError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def traverse(
    view: GraphView,
    start_key: str,
    min_contribution: float,
    terminal_label: str,
    *,
    category: Optional[str] = None,
    emit: Union[EmitMode, str] = EmitMode.ALL,
    max_depth: Optional[int] = None,
    max_results: Optional[int] = None,
    sink: Optional[DiagnosticSink] = None,
    config: Optional[TraversalConfig] = None,
) -> Iterator[NodeRef]:
    """Traverse incoming edges from the node identified by ``start_key``.

    Args:
        view: Read-only graph access.
        start_key: External lookup key of the start node.
        min_contribution: Non-negative, inclusive admission threshold.
        terminal_label: Nodes carrying this label are emitted and not expanded.
        category: Label the start node must carry; defaults to
            ``config.start_category``.
        emit: ``EmitMode.ALL`` yields every visited node (start included);
            ``EmitMode.TERMINAL`` yields terminal-label matches only. The
            names ``"all"`` and ``"terminal"`` are accepted too.
        max_depth: Optional bound on path length.
        max_results: Optional bound on the number of yielded results.
        sink: Optional diagnostic sink receiving ``TraversalEvent``s.
        config: Configuration supplying the default start category.

    Returns:
        Lazy iterator of ``NodeRef`` in depth-first pre-order.

    Raises:
        InvalidThresholdError: If ``min_contribution``, ``max_depth`` or
            ``max_results`` is out of range, or ``emit`` names no mode.
        NodeNotFoundError: If ``start_key`` resolves to no node.
        MalformedWeightError: If an incoming weight of the start node is malformed.
    """
    threshold = _check_threshold(min_contribution)
    emit = _check_emit(emit)
    max_depth = _check_bound("max_depth", max_depth)
    max_results = _check_bound("max_results", max_results)
    category = category or (config or DEFAULT_CONFIG).start_category

    start = view.find_node_by_key(category, start_key)
    if start is None:
        logger.error("Start node not found: category=%s key=%s", category, start_key)
        raise NodeNotFoundError(category, start_key)

    start_edges = view.incoming_edges(start)
    start_state = root_state(view, start, start_edges)
    logger.debug(
        "contribution: %s hash: %s influx: %s",
        start_state.contribution,
        start_key,
        start_state.influx,
    )

    engine = TraversalEngine(
        view,
        threshold,
        terminal_label,
        emit=emit,
        max_depth=max_depth,
        sink=sink,
    )
    results = engine.run(start, start_state, start_edges)
    if max_results is not None:
        return islice(results, max_results)
    return results
