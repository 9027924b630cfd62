"""Unweighted (hop-count) shortest paths by breadth-first search."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Deque, Dict, List, Mapping, Optional

from ..core.errors import ConcurrencyMisuse, NotFound
from ..core.graph import EdgeId, SparseGraph, Vertex

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistanceRecord:
    """Distances and shortest-path-tree edges from one source.

    Unreachable vertices appear in neither map; the source has distance 0 and
    no incoming edge.
    """

    source: Vertex
    distances: Mapping[Vertex, int]
    incoming_edges: Mapping[Vertex, EdgeId]

    def distance(self, target: Vertex) -> Optional[int]:
        return self.distances.get(target)

    def path_to(self, graph: SparseGraph, target: Vertex) -> Optional[List[EdgeId]]:
        """Edges from the source to ``target`` in walking order, or ``None`` if unreachable."""

        if target not in self.distances:
            return None
        path: List[EdgeId] = []
        current = target
        while current != self.source:
            edge = self.incoming_edges[current]
            path.append(edge)
            current = graph.get_opposite(current, edge)
        path.reverse()
        return path


def bfs_distances(graph: SparseGraph, source: Vertex) -> DistanceRecord:
    """Breadth-first search from ``source`` honouring edge direction."""

    if not graph.contains_vertex(source):
        raise NotFound(f"unknown source vertex {source!r}")
    version = graph.version
    distances: Dict[Vertex, int] = {source: 0}
    incoming: Dict[Vertex, EdgeId] = {}
    frontier: Deque[Vertex] = deque([source])
    while frontier:
        vertex = frontier.popleft()
        hops = distances[vertex] + 1
        for edge, other in graph.traversable_out_edges(vertex):
            if other in distances:
                continue
            distances[other] = hops
            incoming[other] = edge
            frontier.append(other)
        if graph.version != version:
            raise ConcurrencyMisuse("graph mutated during breadth-first traversal")
    LOGGER.debug("bfs_distances source=%r reached=%d", source, len(distances))
    return DistanceRecord(
        source=source,
        distances=MappingProxyType(distances),
        incoming_edges=MappingProxyType(incoming),
    )


class UnweightedShortestPath:
    """Caches one :class:`DistanceRecord` per source until the graph changes."""

    def __init__(self, graph: SparseGraph) -> None:
        self.graph = graph
        self._records: Dict[Vertex, DistanceRecord] = {}
        self._version = graph.version

    def distance_record(self, source: Vertex) -> DistanceRecord:
        if self.graph.version != self._version:
            self._records.clear()
            self._version = self.graph.version
        record = self._records.get(source)
        if record is None:
            record = bfs_distances(self.graph, source)
            self._records[source] = record
        return record

    def get_distance(self, source: Vertex, target: Vertex) -> Optional[int]:
        if not self.graph.contains_vertex(target):
            raise NotFound(f"unknown target vertex {target!r}")
        return self.distance_record(source).distance(target)

    def get_distance_map(self, source: Vertex) -> Mapping[Vertex, int]:
        return self.distance_record(source).distances

    def get_incoming_edge_map(self, source: Vertex) -> Mapping[Vertex, EdgeId]:
        return self.distance_record(source).incoming_edges

    def get_path(self, source: Vertex, target: Vertex) -> Optional[List[EdgeId]]:
        if not self.graph.contains_vertex(target):
            raise NotFound(f"unknown target vertex {target!r}")
        return self.distance_record(source).path_to(self.graph, target)

    def reset(self, source: Optional[Vertex] = None) -> None:
        if source is None:
            self._records.clear()
        else:
            self._records.pop(source, None)
