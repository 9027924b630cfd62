import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _clean_weft_env(monkeypatch):
    for name in (
        "WEFT_RELAX_SLEEP_MS",
        "WEFT_PRERELAX_BUDGET_MS",
        "WEFT_STOP_TIMEOUT_MS",
        "WEFT_CHECK_INVARIANTS",
        "WEFT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
