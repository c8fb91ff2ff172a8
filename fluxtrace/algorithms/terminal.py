"""Terminal node classification."""

from __future__ import annotations

from typing import AbstractSet

from fluxtrace.algorithms.base import Decision


def classify(labels: AbstractSet[str], terminal_label: str) -> Decision:
    """Return ``RESULT_AND_PRUNE`` for nodes carrying ``terminal_label``, else ``CONTINUE``."""
    if terminal_label in labels:
        return Decision.RESULT_AND_PRUNE
    return Decision.CONTINUE
