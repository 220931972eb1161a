import copy
import json
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


def _load_fixture(name: str):
    with open(FIXTURES / name, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def _agreement_request_master():
    return _load_fixture("agreement_request.json")


@pytest.fixture()
def agreement_request(_agreement_request_master):
    """A complete, valid request body; each test gets its own copy."""
    return copy.deepcopy(_agreement_request_master)


@pytest.fixture(autouse=True)
def isolate_metrics(monkeypatch, tmp_path):
    """Keep metric CSV writes inside the test's temp dir."""
    monkeypatch.setenv("METRICS_DIR", str(tmp_path / "metrics"))
    monkeypatch.delenv("METRICS_ENABLED", raising=False)
