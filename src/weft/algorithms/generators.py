"""Random graph generators."""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Hashable, List, Optional

import numpy as np

from ..core.errors import InvalidParameter
from ..core.graph import SparseGraph, Vertex, copy_graph

LOGGER = logging.getLogger(__name__)

Factory = Callable[[], Hashable]


def _counter() -> Factory:
    count = itertools.count()
    return lambda: next(count)


class BarabasiAlbertGenerator:
    """
    Preferential-attachment growth.

    The graph starts as ``init_vertices`` isolated vertices. Every timestep
    adds one vertex and attaches it to ``edges_to_attach`` distinct existing
    vertices, each picked with probability proportional to ``degree + 1`` so
    that isolated vertices can still be chosen.
    """

    def __init__(
        self,
        init_vertices: int,
        edges_to_attach: int,
        *,
        seed: Optional[int] = None,
        directed: bool = True,
        vertex_factory: Optional[Factory] = None,
        edge_factory: Optional[Factory] = None,
    ) -> None:
        if init_vertices < 1:
            raise InvalidParameter(f"init_vertices must be at least 1, got {init_vertices}")
        if edges_to_attach < 1:
            raise InvalidParameter(f"edges_to_attach must be at least 1, got {edges_to_attach}")
        if edges_to_attach > init_vertices:
            raise InvalidParameter(
                f"edges_to_attach ({edges_to_attach}) cannot exceed init_vertices ({init_vertices})"
            )
        self.init_vertices = int(init_vertices)
        self.edges_to_attach = int(edges_to_attach)
        self.directed = directed
        self.rng = np.random.default_rng(seed)
        self._vertex_factory = vertex_factory or _counter()
        self._edge_factory = edge_factory or _counter()
        self._graph = SparseGraph()
        self._order: List[Vertex] = []
        for _ in range(self.init_vertices):
            self._new_vertex()
        self.timesteps = 0

    def _new_vertex(self) -> Vertex:
        vertex = self._vertex_factory()
        if not self._graph.add_vertex(vertex):
            raise InvalidParameter(f"vertex factory produced duplicate vertex {vertex!r}")
        self._order.append(vertex)
        return vertex

    def _pick_targets(self) -> List[Vertex]:
        weights = np.array([self._graph.degree(v) + 1 for v in self._order], dtype=float)
        picks = self.rng.choice(len(self._order), size=self.edges_to_attach, replace=False, p=weights / weights.sum())
        return [self._order[i] for i in picks]

    def evolve_graph(self, timesteps: int) -> None:
        for _ in range(int(timesteps)):
            targets = self._pick_targets()
            vertex = self._new_vertex()
            for target in targets:
                self._graph.add_edge(self._edge_factory(), vertex, target, self.directed)
            self.timesteps += 1
        LOGGER.debug(
            "BarabasiAlbertGenerator timesteps=%d vertices=%d edges=%d",
            self.timesteps,
            self._graph.vertex_count(),
            self._graph.edge_count(),
        )

    def generate_graph(self) -> SparseGraph:
        """Return a snapshot of the graph grown so far."""

        return copy_graph(self._graph)
