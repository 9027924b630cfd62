"""PageRank with vertex priors, computed by power iteration."""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..core.errors import ConcurrencyMisuse, InvalidParameter, NotFound
from ..core.graph import EdgeId, EdgeKind, SparseGraph, Vertex

LOGGER = logging.getLogger(__name__)

EdgeWeight = Union[Callable[[EdgeId], float], Mapping[EdgeId, float]]
VertexPrior = Union[Callable[[Vertex], float], Mapping[Vertex, float]]


def _as_function(source: Union[Callable, Mapping, None], what: str) -> Optional[Callable]:
    if source is None:
        return None
    if isinstance(source, Mapping):
        table = source

        def lookup(key):
            try:
                return table[key]
            except KeyError:
                raise NotFound(f"no {what} given for {key!r}") from None

        return lookup
    if callable(source):
        return source
    raise InvalidParameter(f"{what} must be a callable or a mapping, got {type(source).__name__}")


def _checked(value: float, what: str, key: object) -> float:
    value = float(value)
    if math.isnan(value) or value < 0:
        raise InvalidParameter(f"{what} for {key!r} must be non-negative, got {value}")
    return value


class PageRankWithPriors:
    """
    Iterative vertex scoring blending teleportation to a prior with propagation
    along edges::

        score'(v) = alpha * prior(v)
                    + (1 - alpha) * (sum over e into v of share(e) * score(source(e))
                                     + sink_mass * prior(v))

    ``share(e)`` is the weight of ``e`` over the total weight leaving its
    source. Vertices with nothing (or only zero weight) leaving them are sinks;
    their score is handed back in proportion to the prior, so the scores keep
    summing to one whenever the priors do. Undirected edges carry score both ways.

    Weights and priors are read once, when the instance is built. The graph
    must not change afterwards; a mutation is reported as ``ConcurrencyMisuse``
    on the next step.
    """

    def __init__(
        self,
        graph: SparseGraph,
        alpha: float,
        *,
        edge_weight: Optional[EdgeWeight] = None,
        vertex_prior: Optional[VertexPrior] = None,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
    ) -> None:
        alpha = float(alpha)
        if math.isnan(alpha) or not 0.0 <= alpha <= 1.0:
            raise InvalidParameter(f"alpha must lie in [0, 1], got {alpha}")
        if int(max_iterations) < 1:
            raise InvalidParameter(f"max_iterations must be at least 1, got {max_iterations}")
        if float(tolerance) < 0:
            raise InvalidParameter(f"tolerance must be non-negative, got {tolerance}")
        self.graph = graph
        self.alpha = alpha
        self.max_iterations = int(max_iterations)
        self.tolerance = float(tolerance)
        self.iterations = 0
        self.delta = math.inf
        self._version = graph.version

        self._vertices: List[Vertex] = list(graph.iter_vertices())
        self._index: Dict[Vertex, int] = {v: i for i, v in enumerate(self._vertices)}
        n = len(self._vertices)
        self._prior = self._prior_vector(_as_function(vertex_prior, "prior"), n)
        self._src, self._dst, self._share, self._sinks = self._propagation(_as_function(edge_weight, "weight"), n)
        self._scores = self._prior.copy()
        LOGGER.debug(
            "PageRankWithPriors vertices=%d arcs=%d sinks=%d alpha=%s",
            n,
            len(self._src),
            int(self._sinks.sum()),
            alpha,
        )

    def _prior_vector(self, prior: Optional[Callable[[Vertex], float]], n: int) -> np.ndarray:
        if n == 0:
            return np.zeros(0)
        if prior is None:
            return np.full(n, 1.0 / n)
        return np.array([_checked(prior(v), "prior", v) for v in self._vertices], dtype=float)

    def _propagation(
        self, weight: Optional[Callable[[EdgeId], float]], n: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        weights: Dict[EdgeId, float] = {}
        for edge, _record in self.graph.iter_edges():
            weights[edge] = 1.0 if weight is None else _checked(weight(edge), "weight", edge)

        src: List[int] = []
        dst: List[int] = []
        raw: List[float] = []
        totals = np.zeros(n)
        for edge, record in self.graph.iter_edges():
            arcs = [(record.source, record.dest)]
            if record.kind is EdgeKind.UNDIRECTED and record.source != record.dest:
                arcs.append((record.dest, record.source))
            for u, v in arcs:
                i = self._index[u]
                src.append(i)
                dst.append(self._index[v])
                raw.append(weights[edge])
                totals[i] += weights[edge]

        src_arr = np.array(src, dtype=int)
        dst_arr = np.array(dst, dtype=int)
        raw_arr = np.array(raw, dtype=float)
        share = np.zeros(len(raw_arr))
        if len(raw_arr):
            denom = totals[src_arr]
            np.divide(raw_arr, denom, out=share, where=denom > 0)
        return src_arr, dst_arr, share, totals <= 0

    # -- iterative process --------------------------------------------------

    def done(self) -> bool:
        if not self._vertices:
            return True
        if self.iterations >= self.max_iterations:
            return True
        return self.iterations > 0 and self.delta < self.tolerance

    def step(self) -> None:
        if self.graph.version != self._version:
            raise ConcurrencyMisuse("graph mutated while PageRank was iterating")
        scores = self._scores
        propagated = np.zeros(len(scores))
        np.add.at(propagated, self._dst, self._share * scores[self._src])
        sink_mass = scores[self._sinks].sum()
        updated = self.alpha * self._prior + (1.0 - self.alpha) * (propagated + sink_mass * self._prior)
        self.delta = float(np.abs(updated - scores).sum())
        self._scores = updated
        self.iterations += 1

    def evaluate(self) -> Dict[Vertex, float]:
        """Iterate until convergence or ``max_iterations`` and return the scores."""

        while not self.done():
            self.step()
        if self._vertices and self.delta >= self.tolerance:
            LOGGER.info(
                "PageRank stopped after %d iterations without converging (delta=%.3g, tolerance=%.3g)",
                self.iterations,
                self.delta,
                self.tolerance,
            )
        return self.scores()

    # -- results ------------------------------------------------------------

    def scores(self) -> Dict[Vertex, float]:
        return {v: float(self._scores[i]) for i, v in enumerate(self._vertices)}

    def get_vertex_score(self, vertex: Vertex) -> float:
        try:
            return float(self._scores[self._index[vertex]])
        except KeyError:
            raise NotFound(f"unknown vertex {vertex!r}") from None

    def rankings(self) -> List[Tuple[Vertex, float]]:
        """``(vertex, score)`` pairs, best first."""

        return sorted(self.scores().items(), key=lambda item: item[1], reverse=True)

    @property
    def converged(self) -> bool:
        return self.iterations > 0 and self.delta < self.tolerance


class PageRank(PageRankWithPriors):
    """PageRank with a uniform prior over all vertices."""

    def __init__(
        self,
        graph: SparseGraph,
        alpha: float,
        *,
        edge_weight: Optional[EdgeWeight] = None,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
    ) -> None:
        super().__init__(
            graph,
            alpha,
            edge_weight=edge_weight,
            max_iterations=max_iterations,
            tolerance=tolerance,
        )
