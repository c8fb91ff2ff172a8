"""Base enums, types and errors for the traversal algorithms."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Hashable, Sequence

#: A fraction of the start node's influence, conceptually in ``[0, 1]``.
Contribution = float

#: Contribution assigned to the start node of every traversal.
ROOT_CONTRIBUTION: Contribution = 1.0


class Decision(IntEnum):
    """Outcome of classifying a visited node."""

    #: Emit the node and do not expand past it.
    RESULT_AND_PRUNE = 1
    #: Keep expanding; the node is emitted according to the emit mode.
    CONTINUE = 2


class EmitMode(IntEnum):
    """Which visited nodes the traversal yields."""

    #: Every visited node, start node included, in depth-first pre-order.
    ALL = 1
    #: Only nodes carrying the terminal label.
    TERMINAL = 2

    @classmethod
    def from_string(cls, value: str) -> "EmitMode":
        """Parse a case-insensitive name such as ``"all"`` or ``"terminal"``.

        Raises:
            ValueError: If the string doesn't match any enum member.
        """
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid emit mode '{value}'. Valid values are: {valid}"
            ) from None


class NodeNotFoundError(KeyError):
    """The start key resolves to no node of the requested category."""

    def __init__(self, category: str, key: str) -> None:
        self.category = category
        self.key = key
        super().__init__(f"No node labelled '{category}' with key '{key}'")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0])


class InvalidThresholdError(ValueError):
    """A traversal parameter is out of range (e.g. a negative threshold)."""


class MalformedWeightError(ValueError):
    """An edge weight is not a finite, non-negative real number."""

    def __init__(self, edge_key: Hashable, weight: Any) -> None:
        self.edge_key = edge_key
        self.weight = weight
        super().__init__(f"Edge '{edge_key}' has malformed weight {weight!r}")


class InfluxOverflowError(MalformedWeightError):
    """The incoming weights of a node sum past the float range."""

    def __init__(self, edge_keys: Sequence[Hashable]) -> None:
        self.edge_keys = tuple(edge_keys)
        self.edge_key = self.edge_keys[-1] if self.edge_keys else None
        self.weight = None
        ValueError.__init__(
            self, f"Incoming weights on edges {list(self.edge_keys)} overflow the float range"
        )
