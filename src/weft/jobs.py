"""
Job files (YAML → structured config) for the ``weft`` command line.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional, Tuple

import yaml

from .core.graph import SparseGraph

JOB_KIND = "weft.job.v1"

LOGGER = logging.getLogger(__name__)


class JobSpecError(ValueError):
    """Raised when a job file is invalid."""


@dataclass(frozen=True)
class EdgeSpec:
    id: Hashable
    source: Hashable
    dest: Hashable
    directed: bool = True
    weight: float = 1.0


@dataclass(frozen=True)
class PageRankSpec:
    alpha: float = 0.15
    max_iterations: int = 100
    tolerance: float = 1e-6
    priors: Optional[Dict[Hashable, float]] = None


@dataclass(frozen=True)
class ShortestPathSpec:
    source: Optional[Hashable] = None


@dataclass(frozen=True)
class RelaxerSpec:
    sleep_ms: Optional[float] = None
    prerelax_ms: Optional[float] = None


@dataclass(frozen=True)
class JobSpec:
    kind: str
    name: str
    vertices: Tuple[Hashable, ...]
    edges: Tuple[EdgeSpec, ...]
    pagerank: PageRankSpec = field(default_factory=PageRankSpec)
    shortest_path: ShortestPathSpec = field(default_factory=ShortestPathSpec)
    relaxer: RelaxerSpec = field(default_factory=RelaxerSpec)

    def weights(self) -> Dict[Hashable, float]:
        return {edge.id: edge.weight for edge in self.edges}


def load_job_spec(path: Path) -> JobSpec:
    job_path = Path(path)
    if not job_path.exists():
        raise JobSpecError(f"Job file '{job_path}' not found.")
    data = yaml.safe_load(job_path.read_text(encoding="utf-8"))
    return parse_job_spec(data)


def parse_job_spec(data: Any) -> JobSpec:
    if not isinstance(data, dict):
        raise JobSpecError("Job file must be a YAML mapping.")
    kind = str(data.get("kind", JOB_KIND)).strip()
    if kind != JOB_KIND:
        raise JobSpecError(f"Unknown job kind '{kind}'. Supported kinds: '{JOB_KIND}'.")
    graph = data.get("graph")
    if not isinstance(graph, dict):
        raise JobSpecError("Job file requires a 'graph' section.")
    vertices = graph.get("vertices") or []
    if not isinstance(vertices, list):
        raise JobSpecError("'graph.vertices' must be a list.")
    edges = _parse_edges(graph.get("edges") or [])
    spec = JobSpec(
        kind=kind,
        name=str(data.get("name") or "unnamed_job"),
        vertices=tuple(vertices),
        edges=tuple(edges),
        pagerank=_parse_pagerank(data.get("pagerank") or {}),
        shortest_path=_parse_shortest_path(data.get("shortest_path") or {}),
        relaxer=_parse_relaxer(data.get("relaxer") or {}),
    )
    LOGGER.debug("parsed job %s vertices=%d edges=%d", spec.name, len(spec.vertices), len(spec.edges))
    return spec


def _parse_edges(section: Any) -> List[EdgeSpec]:
    if not isinstance(section, list):
        raise JobSpecError("'graph.edges' must be a list.")
    edges: List[EdgeSpec] = []
    for index, entry in enumerate(section):
        if not isinstance(entry, dict):
            raise JobSpecError(f"Edge #{index} must be a mapping.")
        if "source" not in entry or "dest" not in entry:
            raise JobSpecError(f"Edge #{index} requires 'source' and 'dest'.")
        try:
            weight = float(entry.get("weight", 1.0))
        except (TypeError, ValueError):
            raise JobSpecError(f"Edge #{index} has a non-numeric weight.") from None
        edges.append(
            EdgeSpec(
                id=entry.get("id", f"e{index}"),
                source=entry["source"],
                dest=entry["dest"],
                directed=bool(entry.get("directed", True)),
                weight=weight,
            )
        )
    return edges


def _parse_pagerank(section: Any) -> PageRankSpec:
    if not isinstance(section, dict):
        raise JobSpecError("'pagerank' must be a mapping.")
    priors = section.get("priors")
    if priors is not None and not isinstance(priors, dict):
        raise JobSpecError("'pagerank.priors' must map vertices to numbers.")
    try:
        return PageRankSpec(
            alpha=float(section.get("alpha", 0.15)),
            max_iterations=int(section.get("max_iterations", 100)),
            tolerance=float(section.get("tolerance", 1e-6)),
            priors={key: float(value) for key, value in priors.items()} if priors else None,
        )
    except (TypeError, ValueError):
        raise JobSpecError("'pagerank' values must be numeric.") from None


def _parse_shortest_path(section: Any) -> ShortestPathSpec:
    if not isinstance(section, dict):
        raise JobSpecError("'shortest_path' must be a mapping.")
    return ShortestPathSpec(source=section.get("source"))


def _parse_relaxer(section: Any) -> RelaxerSpec:
    if not isinstance(section, dict):
        raise JobSpecError("'relaxer' must be a mapping.")
    sleep_ms = section.get("sleep_ms")
    prerelax_ms = section.get("prerelax_ms")
    try:
        return RelaxerSpec(
            sleep_ms=float(sleep_ms) if sleep_ms is not None else None,
            prerelax_ms=float(prerelax_ms) if prerelax_ms is not None else None,
        )
    except (TypeError, ValueError):
        raise JobSpecError("'relaxer' values must be numeric.") from None


def build_job_graph(spec: JobSpec) -> SparseGraph:
    graph = SparseGraph()
    for vertex in spec.vertices:
        graph.add_vertex(vertex)
    for edge in spec.edges:
        graph.add_edge(edge.id, edge.source, edge.dest, edge.directed)
    return graph


def dump_job_spec(spec: JobSpec, path: Path) -> None:
    payload = {
        "kind": spec.kind,
        "name": spec.name,
        "graph": {
            "vertices": list(spec.vertices),
            "edges": [
                {"id": e.id, "source": e.source, "dest": e.dest, "directed": e.directed, "weight": e.weight}
                for e in spec.edges
            ],
        },
        "pagerank": {
            "alpha": spec.pagerank.alpha,
            "max_iterations": spec.pagerank.max_iterations,
            "tolerance": spec.pagerank.tolerance,
        },
    }
    if spec.pagerank.priors:
        payload["pagerank"]["priors"] = dict(spec.pagerank.priors)
    if spec.shortest_path.source is not None:
        payload["shortest_path"] = {"source": spec.shortest_path.source}
    relaxer = {
        key: value
        for key, value in (("sleep_ms", spec.relaxer.sleep_ms), ("prerelax_ms", spec.relaxer.prerelax_ms))
        if value is not None
    }
    if relaxer:
        payload["relaxer"] = relaxer
    Path(path).write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
