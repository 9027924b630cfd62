"""Read-only export of weft graphs to networkx."""
from __future__ import annotations

from typing import Callable, Optional

try:
    import networkx as nx
except ImportError as exc:  # pragma: no cover - optional dependency
    raise ImportError(
        "weft.interop requires networkx. Install it via 'pip install weft-graph[interop]' or 'pip install networkx'."
    ) from exc

from .core.graph import EdgeId, SparseGraph


def to_networkx(graph: SparseGraph, weight: Optional[Callable[[EdgeId], float]] = None) -> nx.MultiDiGraph:
    """
    Convert a :class:`SparseGraph` into a ``networkx.MultiDiGraph`` keyed by edge id.

    Undirected edges become a pair of opposite arcs sharing the edge id and
    flagged ``undirected=True`` (a self-loop stays a single arc).
    """

    result = nx.MultiDiGraph()
    result.add_nodes_from(graph.iter_vertices())
    for edge, record in graph.iter_edges():
        attrs = {"undirected": not record.directed}
        if weight is not None:
            attrs["weight"] = float(weight(edge))
        result.add_edge(record.source, record.dest, key=edge, **attrs)
        if not record.directed and record.source != record.dest:
            result.add_edge(record.dest, record.source, key=edge, **attrs)
    return result
