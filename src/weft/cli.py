"""Command line entry points for weft graphs."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Hashable, Mapping, Sequence

from .algorithms.generators import BarabasiAlbertGenerator
from .algorithms.pagerank import PageRankWithPriors
from .algorithms.shortest_path import UnweightedShortestPath
from .config import resolve_log_level
from .core.errors import GraphError
from .core.graph import edge_tuples
from .core.relaxer import Relaxer
from .jobs import EdgeSpec, JOB_KIND, JobSpec, JobSpecError, build_job_graph, dump_job_spec, load_job_spec
from .live import EventBus

LOGGER = logging.getLogger(__name__)


def _emit(payload: Mapping[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _keyed(values: Mapping[Hashable, Any]) -> Dict[str, Any]:
    return {str(key): value for key, value in values.items()}


def _pagerank_for(spec: JobSpec, graph, alpha: float | None = None) -> PageRankWithPriors:
    return PageRankWithPriors(
        graph,
        spec.pagerank.alpha if alpha is None else alpha,
        edge_weight=spec.weights(),
        vertex_prior=spec.pagerank.priors,
        max_iterations=spec.pagerank.max_iterations,
        tolerance=spec.pagerank.tolerance,
    )


def command_path(args: argparse.Namespace) -> None:
    spec = load_job_spec(args.job)
    graph = build_job_graph(spec)
    source = args.source if args.source is not None else spec.shortest_path.source
    if source is None:
        raise ValueError("No source vertex: pass --source or set 'shortest_path.source'.")
    if not graph.contains_vertex(source) and str(source).isdigit():
        # vertices parsed from YAML may be integers
        source = int(source)
    paths = UnweightedShortestPath(graph)
    record = paths.distance_record(source)
    _emit(
        {
            "job": spec.name,
            "source": source,
            "distances": _keyed(record.distances),
            "incoming_edges": _keyed(record.incoming_edges),
            "unreachable": sorted(str(v) for v in graph.get_vertices() if v not in record.distances),
        }
    )


def command_rank(args: argparse.Namespace) -> None:
    spec = load_job_spec(args.job)
    graph = build_job_graph(spec)
    ranker = _pagerank_for(spec, graph, args.alpha)
    ranker.evaluate()
    rankings = ranker.rankings()
    if args.top is not None:
        rankings = rankings[: args.top]
    _emit(
        {
            "job": spec.name,
            "alpha": ranker.alpha,
            "iterations": ranker.iterations,
            "converged": ranker.converged,
            "rankings": [[str(vertex), score] for vertex, score in rankings],
        }
    )


def command_relax(args: argparse.Namespace) -> None:
    spec = load_job_spec(args.job)
    graph = build_job_graph(spec)
    ranker = _pagerank_for(spec, graph)
    bus = EventBus(capacity=64)
    bus.subscribe(lambda event: LOGGER.info("relaxer event %s", event))
    relaxer = Relaxer(
        ranker,
        sleep_time=spec.relaxer.sleep_ms / 1000.0 if spec.relaxer.sleep_ms is not None else None,
        prerelax_budget=spec.relaxer.prerelax_ms / 1000.0 if spec.relaxer.prerelax_ms is not None else None,
        event_bus=bus,
        name=f"relax-{spec.name}",
    )
    relaxer.resume()
    if not relaxer.join(args.duration):
        relaxer.stop()
    relaxer.raise_if_failed()
    status = relaxer.status()
    _emit(
        {
            "job": spec.name,
            "state": status.state.value,
            "steps": status.steps,
            "iterations": ranker.iterations,
            "converged": ranker.converged,
            "events": bus.kinds(),
            "rankings": [[str(vertex), score] for vertex, score in ranker.rankings()],
        }
    )


def command_generate(args: argparse.Namespace) -> None:
    generator = BarabasiAlbertGenerator(
        args.init,
        args.attach,
        seed=args.seed,
        directed=not args.undirected,
    )
    generator.evolve_graph(args.steps)
    graph = generator.generate_graph()
    degrees = sorted((graph.degree(v) for v in graph.iter_vertices()), reverse=True)
    if args.output:
        job = JobSpec(
            kind=JOB_KIND,
            name=f"barabasi_albert_{args.init}_{args.attach}_{args.steps}",
            vertices=tuple(graph.iter_vertices()),
            edges=tuple(EdgeSpec(id=e, source=a, dest=b, directed=d) for e, a, b, d in edge_tuples(graph)),
        )
        dump_job_spec(job, args.output)
    _emit(
        {
            "vertices": graph.vertex_count(),
            "edges": graph.edge_count(),
            "max_degree": degrees[0] if degrees else 0,
            "output": str(args.output) if args.output else None,
        }
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weft", description="Graph store, scoring and relaxation helpers.")
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to $WEFT_LOG_LEVEL or WARNING).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    path = subparsers.add_parser("path", help="Unweighted shortest paths from one source.")
    path.add_argument("job", type=Path, help="YAML job file.")
    path.add_argument("--source", default=None, help="Source vertex (overrides the job file).")
    path.set_defaults(func=command_path)

    rank = subparsers.add_parser("rank", help="PageRank with priors.")
    rank.add_argument("job", type=Path, help="YAML job file.")
    rank.add_argument("--alpha", type=float, default=None, help="Teleport weight (overrides the job file).")
    rank.add_argument("--top", type=int, default=None, help="Only print the N best vertices.")
    rank.set_defaults(func=command_rank)

    relax = subparsers.add_parser("relax", help="Drive PageRank from a background relaxer.")
    relax.add_argument("job", type=Path, help="YAML job file.")
    relax.add_argument("--duration", type=float, default=5.0, help="Seconds to wait before stopping (default: 5).")
    relax.set_defaults(func=command_relax)

    generate = subparsers.add_parser("generate", help="Grow a Barabasi-Albert graph.")
    generate.add_argument("--init", type=int, default=1, help="Initial isolated vertices.")
    generate.add_argument("--attach", type=int, default=1, help="Edges attached per new vertex.")
    generate.add_argument("--steps", type=int, default=10, help="Timesteps to evolve.")
    generate.add_argument("--seed", type=int, default=None, help="Random seed.")
    generate.add_argument("--undirected", action="store_true", help="Create undirected edges.")
    generate.add_argument("--output", type=Path, default=None, help="Write the graph as a job file.")
    generate.set_defaults(func=command_generate)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        logging.basicConfig(level=resolve_log_level(args.log_level), stream=sys.stderr)
        args.func(args)
    except (GraphError, JobSpecError, ValueError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":  # pragma: no cover - manual invocation path
    main()
