"""Sparse mixed directed/undirected multigraph store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Hashable, Iterable, Iterator, List, Optional, Tuple

from ..config import invariant_checks_enabled
from .errors import NotFound, StructuralViolation
from .invariants import validate_structure

LOGGER = logging.getLogger(__name__)

Vertex = Hashable
EdgeId = Hashable
EdgeTuple = Tuple[EdgeId, Vertex, Vertex, bool]


class EdgeKind(Enum):
    DIRECTED = "directed"
    UNDIRECTED = "undirected"


@dataclass(frozen=True)
class EdgeRecord:
    """Endpoint pair plus directedness; immutable once stored."""

    source: Vertex
    dest: Vertex
    kind: EdgeKind

    @property
    def endpoints(self) -> Tuple[Vertex, Vertex]:
        return (self.source, self.dest)

    @property
    def directed(self) -> bool:
        return self.kind is EdgeKind.DIRECTED


@dataclass
class _Adjacency:
    # dicts used as insertion-ordered sets
    incoming: Dict[EdgeId, None] = field(default_factory=dict)
    outgoing: Dict[EdgeId, None] = field(default_factory=dict)


class SparseGraph:
    """
    Adjacency-indexed graph allowing parallel edges, self-loops and a mix of
    directed and undirected edges.

    Every edge is recorded once: in ``outgoing`` of its first endpoint and in
    ``incoming`` of its second, whatever its kind. ``get_in_edges`` and
    ``get_out_edges`` expose that raw index; the ``traversable_*`` views and the
    vertex queries built on them also walk undirected edges backwards.

    The store is not synchronized. Readers that traverse it while another
    thread mutates it get :class:`~weft.core.errors.ConcurrencyMisuse` from the
    algorithms on a best-effort basis (see :attr:`version`).
    """

    def __init__(self, *, check_invariants: Optional[bool] = None) -> None:
        self._vertices: Dict[Vertex, _Adjacency] = {}
        self._edges: Dict[EdgeId, EdgeRecord] = {}
        self._version = 0
        self.check_invariants = invariant_checks_enabled() if check_invariants is None else check_invariants

    # -- mutation ---------------------------------------------------------

    def add_vertex(self, vertex: Vertex) -> bool:
        if vertex in self._vertices:
            return False
        self._vertices[vertex] = _Adjacency()
        self._mutated()
        return True

    def add_edge(self, edge: EdgeId, v1: Vertex, v2: Vertex, directed: bool = True) -> bool:
        """
        Insert ``edge`` from ``v1`` to ``v2``, creating missing endpoints.

        Returns ``False`` when the very same edge is already present. Reusing an
        id with other endpoints or another kind raises ``StructuralViolation``
        before anything is touched.
        """

        record = EdgeRecord(v1, v2, EdgeKind.DIRECTED if directed else EdgeKind.UNDIRECTED)
        existing = self._edges.get(edge)
        if existing is not None:
            if existing != record:
                raise StructuralViolation(
                    f"edge {edge!r} exists with endpoints {existing.endpoints!r} ({existing.kind.value}); "
                    f"refusing {record.endpoints!r} ({record.kind.value})"
                )
            return False
        for vertex in (v1, v2):
            if vertex not in self._vertices:
                self._vertices[vertex] = _Adjacency()
        self._edges[edge] = record
        self._vertices[v1].outgoing[edge] = None
        self._vertices[v2].incoming[edge] = None
        self._mutated()
        return True

    def add_directed_edge(self, edge: EdgeId, v1: Vertex, v2: Vertex) -> bool:
        return self.add_edge(edge, v1, v2, directed=True)

    def add_undirected_edge(self, edge: EdgeId, v1: Vertex, v2: Vertex) -> bool:
        return self.add_edge(edge, v1, v2, directed=False)

    def remove_vertex(self, vertex: Vertex) -> bool:
        adjacency = self._vertices.get(vertex)
        if adjacency is None:
            return False
        # snapshot: remove_edge mutates the adjacency dicts
        incident = list(adjacency.incoming) + [e for e in adjacency.outgoing if e not in adjacency.incoming]
        for edge in incident:
            self.remove_edge(edge)
        del self._vertices[vertex]
        self._mutated()
        return True

    def remove_edge(self, edge: EdgeId) -> bool:
        record = self._edges.pop(edge, None)
        if record is None:
            return False
        self._vertices[record.source].outgoing.pop(edge, None)
        self._vertices[record.dest].incoming.pop(edge, None)
        self._mutated()
        return True

    def _mutated(self) -> None:
        self._version += 1
        if self.check_invariants:
            validate_structure(self)

    # -- edge lookups -----------------------------------------------------

    def _record(self, edge: EdgeId) -> EdgeRecord:
        try:
            return self._edges[edge]
        except KeyError:
            raise NotFound(f"unknown edge {edge!r}") from None

    def get_edge_record(self, edge: EdgeId) -> EdgeRecord:
        return self._record(edge)

    def get_endpoints(self, edge: EdgeId) -> Tuple[Vertex, Vertex]:
        return self._record(edge).endpoints

    def get_source(self, edge: EdgeId) -> Vertex:
        return self._record(edge).source

    def get_dest(self, edge: EdgeId) -> Vertex:
        return self._record(edge).dest

    def is_directed(self, edge: EdgeId) -> bool:
        return self._record(edge).directed

    def get_edge_kind(self, edge: EdgeId) -> EdgeKind:
        return self._record(edge).kind

    def get_opposite(self, vertex: Vertex, edge: EdgeId) -> Vertex:
        record = self._record(edge)
        if vertex == record.source:
            return record.dest
        if vertex == record.dest:
            return record.source
        raise NotFound(f"vertex {vertex!r} is not incident to edge {edge!r}")

    # -- vertex lookups ---------------------------------------------------

    def _adjacency(self, vertex: Vertex) -> _Adjacency:
        try:
            return self._vertices[vertex]
        except KeyError:
            raise NotFound(f"unknown vertex {vertex!r}") from None

    def get_in_edges(self, vertex: Vertex) -> FrozenSet[EdgeId]:
        return frozenset(self._adjacency(vertex).incoming)

    def get_out_edges(self, vertex: Vertex) -> FrozenSet[EdgeId]:
        return frozenset(self._adjacency(vertex).outgoing)

    def get_incident_edges(self, vertex: Vertex) -> FrozenSet[EdgeId]:
        adjacency = self._adjacency(vertex)
        return frozenset(adjacency.incoming).union(adjacency.outgoing)

    def traversable_out_edges(self, vertex: Vertex) -> Iterator[Tuple[EdgeId, Vertex]]:
        """Yield ``(edge, neighbour)`` for every edge that may be walked away from ``vertex``."""

        adjacency = self._adjacency(vertex)
        for edge in adjacency.outgoing:
            yield edge, self._edges[edge].dest
        for edge in adjacency.incoming:
            record = self._edges[edge]
            # an undirected self-loop was already yielded from ``outgoing``
            if record.kind is EdgeKind.UNDIRECTED and record.source != record.dest:
                yield edge, record.source

    def traversable_in_edges(self, vertex: Vertex) -> Iterator[Tuple[EdgeId, Vertex]]:
        """Yield ``(edge, neighbour)`` for every edge that may be walked into ``vertex``."""

        adjacency = self._adjacency(vertex)
        for edge in adjacency.incoming:
            yield edge, self._edges[edge].source
        for edge in adjacency.outgoing:
            record = self._edges[edge]
            if record.kind is EdgeKind.UNDIRECTED and record.source != record.dest:
                yield edge, record.dest

    def get_predecessors(self, vertex: Vertex) -> FrozenSet[Vertex]:
        return frozenset(other for _edge, other in self.traversable_in_edges(vertex))

    def get_successors(self, vertex: Vertex) -> FrozenSet[Vertex]:
        return frozenset(other for _edge, other in self.traversable_out_edges(vertex))

    def get_neighbors(self, vertex: Vertex) -> FrozenSet[Vertex]:
        return self.get_predecessors(vertex) | self.get_successors(vertex)

    def find_edge(self, v1: Vertex, v2: Vertex) -> Optional[EdgeId]:
        """Return some edge walkable from ``v1`` to ``v2``; which one is unspecified for parallel edges."""

        for edge, other in self.traversable_out_edges(v1):
            if other == v2:
                return edge
        return None

    def degree(self, vertex: Vertex) -> int:
        return len(self.get_incident_edges(vertex))

    def in_degree(self, vertex: Vertex) -> int:
        return len(self._adjacency(vertex).incoming)

    def out_degree(self, vertex: Vertex) -> int:
        return len(self._adjacency(vertex).outgoing)

    # -- enumeration ------------------------------------------------------

    def get_vertices(self) -> FrozenSet[Vertex]:
        return frozenset(self._vertices)

    def get_edges(self) -> FrozenSet[EdgeId]:
        return frozenset(self._edges)

    def iter_vertices(self) -> Iterator[Vertex]:
        """Iterate vertices in insertion order."""

        return iter(list(self._vertices))

    def iter_edges(self) -> Iterator[Tuple[EdgeId, EdgeRecord]]:
        """Iterate ``(edge, record)`` pairs in insertion order."""

        return iter(list(self._edges.items()))

    def contains_vertex(self, vertex: Vertex) -> bool:
        return vertex in self._vertices

    def contains_edge(self, edge: EdgeId) -> bool:
        return edge in self._edges

    def vertex_count(self) -> int:
        return len(self._vertices)

    def edge_count(self) -> int:
        return len(self._edges)

    @property
    def version(self) -> int:
        """Mutation counter; bumped by every successful add/remove."""

        return self._version

    def __contains__(self, vertex: Any) -> bool:
        return vertex in self._vertices

    def __len__(self) -> int:
        return len(self._vertices)

    def __repr__(self) -> str:
        return f"SparseGraph(vertices={len(self._vertices)}, edges={len(self._edges)})"


def build_graph(vertices: Iterable[Vertex], edges: Iterable[EdgeTuple], **kwargs: Any) -> SparseGraph:
    """Convenience helper to build a graph from ``(edge, v1, v2, directed)`` tuples."""

    graph = SparseGraph(**kwargs)
    for vertex in vertices:
        graph.add_vertex(vertex)
    for edge, v1, v2, directed in edges:
        graph.add_edge(edge, v1, v2, directed)
    return graph


def edge_tuples(graph: SparseGraph) -> List[EdgeTuple]:
    return [(edge, record.source, record.dest, record.directed) for edge, record in graph.iter_edges()]


def copy_graph(graph: SparseGraph) -> SparseGraph:
    """Rebuild an equivalent graph purely through enumeration and the add operations."""

    copy = build_graph(graph.iter_vertices(), edge_tuples(graph), check_invariants=graph.check_invariants)
    LOGGER.debug("copy_graph vertices=%d edges=%d", copy.vertex_count(), copy.edge_count())
    return copy
