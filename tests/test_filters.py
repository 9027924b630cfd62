from weft.core.filters import EdgePredicate, VertexPredicate, filter_graph
from weft.core.graph import SparseGraph
from weft.core.invariants import validate_structure


def sample_graph() -> SparseGraph:
    graph = SparseGraph()
    graph.add_edge("ab", "a", "b")
    graph.add_edge("bc", "b", "c", directed=False)
    graph.add_edge("cd", "c", "d")
    graph.add_edge("da", "d", "a")
    return graph


def test_vertex_filter_keeps_induced_edges():
    graph = sample_graph()
    kept = filter_graph(graph, VertexPredicate(lambda g, v: v != "d"))
    assert kept.get_vertices() == {"a", "b", "c"}
    assert kept.get_edges() == {"ab", "bc"}
    assert not kept.is_directed("bc")
    validate_structure(kept)
    # the source graph is untouched
    assert graph.edge_count() == 4


def test_edge_filter_keeps_all_vertices():
    graph = sample_graph()
    directed_only = filter_graph(graph, edge_predicate=EdgePredicate(lambda g, e: g.is_directed(e)))
    assert directed_only.get_vertices() == graph.get_vertices()
    assert directed_only.get_edges() == {"ab", "cd", "da"}


def test_combined_predicates_and_custom_predicate_object():
    class DegreeAtLeastTwo:
        def evaluate_vertex(self, graph, vertex):
            return graph.degree(vertex) >= 2

        def evaluate_edge(self, graph, edge):
            return edge != "ab"

    graph = sample_graph()
    graph.add_edge("ax", "a", "x")
    predicate = DegreeAtLeastTwo()
    filtered = filter_graph(graph, predicate, predicate)
    assert "x" not in filtered
    assert filtered.get_edges() == {"bc", "cd", "da"}
