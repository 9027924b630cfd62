"""Predicate-filtered copies of a graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .graph import EdgeId, SparseGraph, Vertex


class GraphPredicate(Protocol):
    def evaluate_vertex(self, graph: SparseGraph, vertex: Vertex) -> bool:
        ...

    def evaluate_edge(self, graph: SparseGraph, edge: EdgeId) -> bool:
        ...


@dataclass(frozen=True)
class VertexPredicate:
    """Accepts vertices for which ``test(graph, vertex)`` holds, and every edge."""

    test: Callable[[SparseGraph, Vertex], bool]

    def evaluate_vertex(self, graph: SparseGraph, vertex: Vertex) -> bool:
        return bool(self.test(graph, vertex))

    def evaluate_edge(self, graph: SparseGraph, edge: EdgeId) -> bool:
        return True


@dataclass(frozen=True)
class EdgePredicate:
    """Accepts edges for which ``test(graph, edge)`` holds, and every vertex."""

    test: Callable[[SparseGraph, EdgeId], bool]

    def evaluate_vertex(self, graph: SparseGraph, vertex: Vertex) -> bool:
        return True

    def evaluate_edge(self, graph: SparseGraph, edge: EdgeId) -> bool:
        return bool(self.test(graph, edge))


def filter_graph(
    graph: SparseGraph,
    vertex_predicate: Optional[GraphPredicate] = None,
    edge_predicate: Optional[GraphPredicate] = None,
) -> SparseGraph:
    """
    Build a new graph holding the vertices ``vertex_predicate`` accepts and the
    edges ``edge_predicate`` accepts. An accepted edge is dropped when either
    endpoint was filtered out.
    """

    result = SparseGraph(check_invariants=graph.check_invariants)
    for vertex in graph.iter_vertices():
        if vertex_predicate is None or vertex_predicate.evaluate_vertex(graph, vertex):
            result.add_vertex(vertex)
    for edge, record in graph.iter_edges():
        if not (result.contains_vertex(record.source) and result.contains_vertex(record.dest)):
            continue
        if edge_predicate is None or edge_predicate.evaluate_edge(graph, edge):
            result.add_edge(edge, record.source, record.dest, record.directed)
    return result
