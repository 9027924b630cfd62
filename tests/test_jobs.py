from pathlib import Path

import pytest

from weft.jobs import (
    JobSpecError,
    build_job_graph,
    dump_job_spec,
    load_job_spec,
    parse_job_spec,
)

JOB_TEXT = """
kind: weft.job.v1
name: ranker
graph:
  vertices: [0, 1, 2, 3]
  edges:
    - {id: 0, source: 0, dest: 1, weight: 1.0}
    - {id: 1, source: 1, dest: 2, weight: 1.0}
    - {id: 2, source: 2, dest: 3, weight: 0.5}
    - {id: 3, source: 3, dest: 1, weight: 1.0}
    - {id: 4, source: 2, dest: 1, weight: 0.5}
    - {source: 3, dest: 0, directed: false}
pagerank:
  alpha: 0.0
  max_iterations: 500
shortest_path:
  source: 0
relaxer:
  sleep_ms: 1
"""


def write_job(tmp_path: Path, text: str = JOB_TEXT) -> Path:
    path = tmp_path / "job.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_job_spec(tmp_path: Path):
    spec = load_job_spec(write_job(tmp_path))
    assert spec.name == "ranker"
    assert spec.vertices == (0, 1, 2, 3)
    assert len(spec.edges) == 6
    assert spec.edges[-1].id == "e5"
    assert not spec.edges[-1].directed
    assert spec.weights()[2] == 0.5
    assert spec.pagerank.alpha == 0.0
    assert spec.pagerank.max_iterations == 500
    assert spec.pagerank.priors is None
    assert spec.shortest_path.source == 0
    assert spec.relaxer.sleep_ms == 1.0
    assert spec.relaxer.prerelax_ms is None


def test_build_job_graph(tmp_path: Path):
    graph = build_job_graph(load_job_spec(write_job(tmp_path)))
    assert graph.vertex_count() == 4
    assert graph.edge_count() == 6
    assert graph.get_endpoints("e5") == (3, 0)


def test_dump_and_reload(tmp_path: Path):
    spec = load_job_spec(write_job(tmp_path))
    out = tmp_path / "copy.yaml"
    dump_job_spec(spec, out)
    again = load_job_spec(out)
    assert again.vertices == spec.vertices
    assert again.edges == spec.edges
    assert again.pagerank == spec.pagerank


@pytest.mark.parametrize(
    "payload,message",
    [
        ([], "mapping"),
        ({"kind": "other"}, "Unknown job kind"),
        ({"kind": "weft.job.v1"}, "'graph' section"),
        ({"graph": {"edges": [{"source": 1}]}}, "requires 'source' and 'dest'"),
        ({"graph": {"edges": [{"source": 1, "dest": 2, "weight": "heavy"}]}}, "non-numeric"),
        ({"graph": {}, "pagerank": {"priors": [1, 2]}}, "priors"),
        ({"graph": {}, "pagerank": {"alpha": "high"}}, "must be numeric"),
        ({"graph": {}, "pagerank": {"max_iterations": "lots"}}, "must be numeric"),
        ({"graph": {}, "pagerank": {"priors": {"a": "x"}}}, "must be numeric"),
        ({"graph": {}, "relaxer": {"sleep_ms": "soon"}}, "must be numeric"),
    ],
)
def test_invalid_jobs(payload, message):
    with pytest.raises(JobSpecError, match=message):
        parse_job_spec(payload)


def test_missing_file(tmp_path: Path):
    with pytest.raises(JobSpecError, match="not found"):
        load_job_spec(tmp_path / "absent.yaml")
