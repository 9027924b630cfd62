"""weft: sparse multigraphs, graph scoring and a background relaxer."""

from importlib import metadata

from . import algorithms, core, live
from .algorithms import (
    BarabasiAlbertGenerator,
    DistanceRecord,
    PageRank,
    PageRankWithPriors,
    UnweightedShortestPath,
    bfs_distances,
)
from .core.errors import ConcurrencyMisuse, GraphError, InvalidParameter, NotFound, StructuralViolation
from .core.filters import EdgePredicate, GraphPredicate, VertexPredicate, filter_graph
from .core.graph import EdgeKind, EdgeRecord, SparseGraph, build_graph, copy_graph, edge_tuples
from .core.process import IterativeProcess
from .core.relaxer import Relaxer, RelaxerState, RelaxerStatus
from .live import EventBus

try:  # pragma: no cover - metadata only at runtime
    __version__ = metadata.version("weft-graph")
except metadata.PackageNotFoundError:  # pragma: no cover - source tree / editable installs
    __version__ = "0.0.0"

__all__ = [
    "algorithms",
    "core",
    "live",
    "SparseGraph",
    "EdgeKind",
    "EdgeRecord",
    "build_graph",
    "copy_graph",
    "edge_tuples",
    "GraphError",
    "StructuralViolation",
    "NotFound",
    "InvalidParameter",
    "ConcurrencyMisuse",
    "GraphPredicate",
    "VertexPredicate",
    "EdgePredicate",
    "filter_graph",
    "IterativeProcess",
    "Relaxer",
    "RelaxerState",
    "RelaxerStatus",
    "EventBus",
    "UnweightedShortestPath",
    "DistanceRecord",
    "bfs_distances",
    "PageRankWithPriors",
    "PageRank",
    "BarabasiAlbertGenerator",
    "__version__",
]
