"""Optional diagnostic sink for traversal runs.

A sink is any callable accepting a ``TraversalEvent``. The engine calls it
synchronously while it works, so a sink sees events interleaved with the
results the consumer pulls. ``PathLogger`` is a ready-made sink that writes
every event to the package logger; ``EventRecorder`` keeps them in memory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Literal, Optional, Tuple

from fluxtrace.logging import get_logger

logger = get_logger(__name__)

EventKind = Literal[
    "visit",
    "terminal",
    "expand",
    "leaf",
    "depth_limit",
    "branch_aborted",
    "finished",
]


@dataclass(frozen=True, slots=True)
class TraversalEvent:
    """A single observation made by the traversal engine.

    Attributes:
        kind: What happened (see ``EventKind``).
        node: Node the event concerns; None for ``finished``.
        depth: Number of edges between the start node and ``node``.
        path: Edge keys walked from the start node to ``node``.
        contribution: Contribution of ``node`` on this path, when known.
        influx: Incoming weight of ``node``, when measured.
        detail: Extra values, e.g. the number of pushed children.
    """

    kind: EventKind
    node: Optional[Hashable] = None
    depth: int = 0
    path: Tuple[Hashable, ...] = ()
    contribution: Optional[float] = None
    influx: Optional[float] = None
    detail: Dict[str, Any] = field(default_factory=dict)


DiagnosticSink = Callable[[TraversalEvent], None]


class PathLogger:
    """Sink that logs every event, one line per event.

    Args:
        level: Level used for regular events. Aborted branches are always
            logged at WARNING or above.
        name: Logger name.
    """

    def __init__(self, level: int = logging.INFO, name: str = __name__) -> None:
        self.level = level
        self._logger = get_logger(name)

    def __call__(self, event: TraversalEvent) -> None:
        level = self.level
        if event.kind == "branch_aborted":
            level = max(level, logging.WARNING)
        self._logger.log(
            level,
            "%s node=%s depth=%d path=%s contribution=%s influx=%s %s",
            event.kind,
            event.node,
            event.depth,
            list(event.path),
            event.contribution,
            event.influx,
            event.detail or "",
        )


@dataclass
class EventRecorder:
    """Sink that stores events, mostly for tests and the CLI's path trace."""

    events: List[TraversalEvent] = field(default_factory=list)

    def __call__(self, event: TraversalEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[str]:
        """Return the event kinds in arrival order."""
        return [event.kind for event in self.events]

    def of_kind(self, kind: EventKind) -> List[TraversalEvent]:
        """Return the events of one kind."""
        return [event for event in self.events if event.kind == kind]
