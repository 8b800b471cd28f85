"""Shared pytest configuration for the pathtree test suite."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pathtree.testing import create_scenario_tree, create_test_tree


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: tests that build large trees")


@pytest.fixture
def scenario_tree(tmp_path):
    """Reference tree ``a`` with x/1.txt (3 bytes), x/2.txt (5 bytes) and empty y/."""
    return create_scenario_tree(tmp_path / "a")


@pytest.fixture
def test_tree(tmp_path):
    """Mixed six-file tree, see ``pathtree.testing.create_test_tree``."""
    return create_test_tree(tmp_path / "tree")
