import importlib
import sys

import pytest

from weft.core.graph import SparseGraph


def test_missing_networkx_gives_install_hint(monkeypatch):
    monkeypatch.setitem(sys.modules, "networkx", None)
    monkeypatch.delitem(sys.modules, "weft.interop", raising=False)
    with pytest.raises(ImportError, match=r"pip install weft-graph\[interop\]"):
        importlib.import_module("weft.interop")


def test_to_networkx_keeps_edge_ids_and_direction():
    pytest.importorskip("networkx")
    from weft.interop import to_networkx

    graph = SparseGraph()
    graph.add_edge("ab", "a", "b")
    graph.add_edge("ab2", "a", "b")
    graph.add_edge("bc", "b", "c", directed=False)
    graph.add_edge("cc", "c", "c", directed=False)
    graph.add_vertex("d")
    exported = to_networkx(graph, weight=lambda edge: 2.0)
    assert set(exported.nodes) == {"a", "b", "c", "d"}
    assert exported.number_of_edges("a", "b") == 2
    assert exported.has_edge("c", "b", key="bc")
    assert exported.edges["b", "c", "bc"]["undirected"] is True
    assert exported.edges["a", "b", "ab"]["undirected"] is False
    assert exported.number_of_edges("c", "c") == 1
    assert exported.edges["a", "b", "ab"]["weight"] == 2.0
