import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

JOB_TEXT = """
kind: weft.job.v1
name: ranker
graph:
  vertices: [0, 1, 2, 3, 9]
  edges:
    - {id: 0, source: 0, dest: 1, weight: 1.0}
    - {id: 1, source: 1, dest: 2, weight: 1.0}
    - {id: 2, source: 2, dest: 3, weight: 0.5}
    - {id: 3, source: 3, dest: 1, weight: 1.0}
    - {id: 4, source: 2, dest: 1, weight: 0.5}
pagerank:
  alpha: 0.15
  tolerance: 1.0e-10
  max_iterations: 1000
shortest_path:
  source: 0
relaxer:
  sleep_ms: 0
  prerelax_ms: 0
"""


def run_cli(*args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing = env.get("PYTHONPATH", "")
    path_entries = [str(SRC)]
    if existing:
        path_entries.append(existing)
    env["PYTHONPATH"] = os.pathsep.join(path_entries)
    result = subprocess.run(
        [sys.executable, "-m", "weft.cli", *args],
        cwd=ROOT,
        capture_output=True,
        text=True,
        env=env,
    )
    if check and result.returncode != 0:
        raise AssertionError(f"Command failed: {result.stderr}")
    return result


@pytest.fixture
def job_file(tmp_path: Path) -> Path:
    path = tmp_path / "job.yaml"
    path.write_text(JOB_TEXT, encoding="utf-8")
    return path


def test_cli_path(job_file: Path):
    payload = json.loads(run_cli("path", str(job_file)).stdout)
    assert payload["distances"] == {"0": 0, "1": 1, "2": 2, "3": 3}
    assert payload["incoming_edges"]["3"] == 2
    assert payload["unreachable"] == ["9"]


def test_cli_path_source_override(job_file: Path):
    payload = json.loads(run_cli("path", str(job_file), "--source", "3").stdout)
    assert payload["distances"] == {"3": 0, "1": 1, "2": 2}


def test_cli_rank(job_file: Path):
    payload = json.loads(run_cli("rank", str(job_file), "--alpha", "0", "--top", "2").stdout)
    assert payload["converged"]
    assert [vertex for vertex, _score in payload["rankings"]] in (["1", "2"], ["2", "1"])
    assert [score for _vertex, score in payload["rankings"]] == pytest.approx([0.4, 0.4], abs=1e-3)


def test_cli_relax(job_file: Path):
    payload = json.loads(run_cli("relax", str(job_file), "--duration", "10").stdout)
    assert payload["state"] == "stopped"
    assert payload["converged"]
    assert payload["steps"] == payload["iterations"]
    assert payload["events"] == ["relaxer.started", "relaxer.finished"]
    assert sum(score for _vertex, score in payload["rankings"]) == pytest.approx(1.0)


def test_cli_generate_writes_job(tmp_path: Path):
    out = tmp_path / "ba.yaml"
    payload = json.loads(
        run_cli("generate", "--init", "2", "--attach", "2", "--steps", "8", "--seed", "4", "--output", str(out)).stdout
    )
    assert payload["vertices"] == 10
    assert payload["edges"] == 16
    ranked = json.loads(run_cli("rank", str(out)).stdout)
    assert len(ranked["rankings"]) == 10


def test_cli_reports_errors(job_file: Path):
    result = run_cli("path", str(job_file), "--source", "nowhere", check=False)
    assert result.returncode == 2
    assert "unknown source vertex" in result.stderr
    result = run_cli("rank", str(job_file), "--alpha", "2", check=False)
    assert result.returncode == 2
    assert "alpha" in result.stderr
