"""
Test configuration - ensures repo root is in sys.path + pinned clock.

Report engines take `today` explicitly; every fixture here pins it to
FIXTURE_TODAY so aging and burn-rate figures are deterministic.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import society_dash.* and tests.fixtures.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from society_dash.config import ReportingPolicy  # noqa: E402
from society_dash.reporting.service import ReportingService  # noqa: E402
from tests.fixtures.ledger_fixture import FIXTURE_TODAY, build_fixture_store  # noqa: E402


@pytest.fixture
def today():
    return FIXTURE_TODAY


@pytest.fixture
def store():
    """Fresh fixture ledger per test (extend() mutates it)."""
    return build_fixture_store()


@pytest.fixture
def policy():
    """Default policy with two budgeted categories."""
    return ReportingPolicy(category_budgets={"Security": 180000.0, "Housekeeping": 120000.0})


@pytest.fixture
def service(store, policy, today):
    return ReportingService(store, policy=policy, today=today)


@pytest.fixture
def config_file(tmp_path):
    """Write a reporting YAML file and return its path."""

    def _write(text: str) -> Path:
        path = tmp_path / "reporting.yaml"
        path.write_text(text)
        return path

    return _write
