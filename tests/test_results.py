import math

import pytest

from fluxtrace.algorithms.traversal import traverse
from fluxtrace.graph.view import LedgerView
from fluxtrace.results import NodeRef, TraversalSummary


def test_node_ref_to_dict():
    ref = NodeRef(
        node="B",
        key="0xb",
        labels=frozenset({"Target", "Address"}),
        contribution=0.4,
        depth=2,
        edges=("a-s", 7),
        terminal=True,
    )
    assert ref.to_dict() == {
        "node": "B",
        "key": "0xb",
        "labels": ["Address", "Target"],
        "contribution": 0.4,
        "depth": 2,
        "edges": ["a-s", 7],
        "terminal": True,
    }


def test_node_ref_stringifies_complex_ids():
    ref = NodeRef(node=("n", 1), key=None, labels=frozenset(), contribution=1.0, depth=0)
    assert ref.to_dict()["node"] == "('n', 1)"


@pytest.mark.parametrize("contribution", [math.nan, math.inf])
def test_node_ref_rejects_non_finite(contribution):
    with pytest.raises(ValueError, match="finite"):
        NodeRef("n", None, frozenset(), contribution, 0)


def test_node_ref_depth_matches_edges():
    with pytest.raises(ValueError, match="does not match"):
        NodeRef("n", None, frozenset(), 0.5, 2, edges=("e",))


def test_summary_collect(parallel1):
    refs = traverse(LedgerView(parallel1), "0xt", 0.0, "Target")
    summary = TraversalSummary.collect(refs, "0xt", 0.0, "Target")

    assert len(summary.results) == 5
    assert summary.terminals() == []
    assert summary.contribution_by_node() == pytest.approx({"T": 1.0, "P": 1.0, "Q": 1.0})

    data = summary.to_dict()
    assert data["parameters"] == {
        "start_key": "0xt",
        "min_contribution": 0.0,
        "terminal_label": "Target",
    }
    assert data["counts"] == {"results": 5, "terminals": 0, "distinct_nodes": 3}
    assert data["results"][2]["edges"] == ["p1", "q"]
