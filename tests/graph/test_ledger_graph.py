import pytest

from fluxtrace.config import TraversalConfig
from fluxtrace.graph.ledger_graph import LedgerGraph


@pytest.fixture
def graph():
    g = LedgerGraph()
    g.add_node("A", labels=["Address"], hash="0xa")
    g.add_node("B", labels=["Address", "Exchange"], hash="0xb")
    g.add_node("C")
    return g


class TestNodes:
    def test_labels_stored_as_frozenset(self, graph):
        assert graph.node_labels("B") == frozenset({"Address", "Exchange"})
        assert graph.nodes["B"]["labels"] == frozenset({"Address", "Exchange"})

    def test_node_without_labels_or_key(self, graph):
        assert graph.node_labels("C") == frozenset()
        assert graph.node_key("C") is None

    def test_node_key_is_stringified(self, graph):
        graph.add_node("D", labels=["Address"], hash=42)
        assert graph.node_key("D") == "42"

    def test_duplicate_node_rejected(self, graph):
        with pytest.raises(ValueError, match="already exists"):
            graph.add_node("A")

    @pytest.mark.parametrize("label", ["", 3, None])
    def test_invalid_label_rejected(self, graph, label):
        with pytest.raises(ValueError, match="invalid label"):
            graph.add_node("Z", labels=[label])

    def test_unknown_node_queries(self, graph):
        with pytest.raises(ValueError):
            graph.node_labels("nope")
        with pytest.raises(ValueError):
            graph.node_key("nope")
        with pytest.raises(ValueError):
            graph.incoming("nope")

    def test_remove_node_drops_incident_edges(self, graph):
        graph.add_transfer("A", "B", 1)
        graph.add_transfer("B", "C", 2)
        graph.add_transfer("C", "A", 3)
        graph.remove_node("B")
        assert "B" not in graph
        assert [attr["amount"] for *_, attr in graph.get_edges().values()] == [3]

    def test_remove_missing_node(self, graph):
        with pytest.raises(ValueError, match="does not exist"):
            graph.remove_node("nope")


class TestEdges:
    def test_auto_keys_increase(self, graph):
        k1 = graph.add_transfer("A", "B", 1)
        k2 = graph.add_transfer("A", "B", 2)
        assert (k1, k2) == (0, 1)
        assert graph.number_of_edges("A", "B") == 2

    def test_explicit_int_key_advances_counter(self, graph):
        graph.add_transfer("A", "B", 1, key=10)
        assert graph.add_transfer("A", "B", 1) == 11

    def test_duplicate_key_rejected(self, graph):
        graph.add_transfer("A", "B", 1, key="t1")
        with pytest.raises(ValueError, match="already exists"):
            graph.add_transfer("B", "C", 1, key="t1")

    def test_missing_endpoints_rejected(self, graph):
        with pytest.raises(ValueError, match="Source node"):
            graph.add_transfer("X", "A", 1)
        with pytest.raises(ValueError, match="Target node"):
            graph.add_transfer("A", "X", 1)

    def test_incoming_lists_parallel_edges(self, graph):
        graph.add_transfer("A", "B", 1, key="t1")
        graph.add_transfer("A", "B", 2, key="t2")
        graph.add_transfer("C", "B", 3, key="t3")
        graph.add_transfer("B", "C", 4, key="t4")
        incoming = graph.incoming("B")
        assert [(src, dst, key) for src, dst, key, _ in incoming] == [
            ("A", "B", "t1"),
            ("A", "B", "t2"),
            ("C", "B", "t3"),
        ]
        assert [attr["amount"] for *_, attr in incoming] == [1, 2, 3]

    def test_remove_edge_by_id(self, graph):
        graph.add_transfer("A", "B", 1, key="t1")
        graph.remove_edge_by_id("t1")
        assert graph.incoming("B") == []
        with pytest.raises(ValueError, match="not found"):
            graph.remove_edge_by_id("t1")

    def test_get_edge_attr(self, graph):
        graph.add_transfer("A", "B", 7, key="t1")
        assert graph.get_edge_attr("t1") == {"amount": 7}
        with pytest.raises(ValueError):
            graph.get_edge_attr("missing")


def test_custom_attribute_names():
    config = TraversalConfig(key_attr="addr", weight_attr="value", labels_attr="kinds")
    g = LedgerGraph(config=config)
    g.add_node("A", labels=["Wallet"], addr="a1")
    g.add_node("B", labels=["Wallet"], addr="b1")
    g.add_transfer("A", "B", 5, key="t")
    assert g.nodes["A"]["kinds"] == frozenset({"Wallet"})
    assert g.node_key("A") == "a1"
    assert g.get_edge_attr("t") == {"value": 5}
