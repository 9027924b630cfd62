"""Structural invariant checks for :class:`~weft.core.graph.SparseGraph`."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .errors import StructuralViolation

if TYPE_CHECKING:  # pragma: no cover
    from .graph import SparseGraph


def dangling_edges(graph: "SparseGraph") -> List[str]:
    """Describe edges whose endpoints are missing from the vertex map."""

    problems: List[str] = []
    for edge, record in graph._edges.items():
        for vertex in record.endpoints:
            if vertex not in graph._vertices:
                problems.append(f"edge {edge!r} references missing vertex {vertex!r}")
    return problems


def adjacency_mismatches(graph: "SparseGraph") -> List[str]:
    """Describe every disagreement between the edge map and the adjacency index."""

    problems: List[str] = []
    for vertex, adjacency in graph._vertices.items():
        for edge in adjacency.outgoing:
            record = graph._edges.get(edge)
            if record is None:
                problems.append(f"vertex {vertex!r} lists unknown outgoing edge {edge!r}")
            elif record.source != vertex:
                problems.append(f"edge {edge!r} listed as outgoing of {vertex!r} but starts at {record.source!r}")
        for edge in adjacency.incoming:
            record = graph._edges.get(edge)
            if record is None:
                problems.append(f"vertex {vertex!r} lists unknown incoming edge {edge!r}")
            elif record.dest != vertex:
                problems.append(f"edge {edge!r} listed as incoming of {vertex!r} but ends at {record.dest!r}")
    for edge, record in graph._edges.items():
        source = graph._vertices.get(record.source)
        dest = graph._vertices.get(record.dest)
        if source is not None and edge not in source.outgoing:
            problems.append(f"edge {edge!r} missing from outgoing index of {record.source!r}")
        if dest is not None and edge not in dest.incoming:
            problems.append(f"edge {edge!r} missing from incoming index of {record.dest!r}")
    return problems


def validate_structure(graph: "SparseGraph") -> None:
    """Raise ``StructuralViolation`` listing every broken invariant."""

    problems = dangling_edges(graph) + adjacency_mismatches(graph)
    if problems:
        raise StructuralViolation("; ".join(problems))
