"""Shared pytest fixtures for textwfc tests."""

import logging
import tempfile
from pathlib import Path

import pytest

from textwfc.logging_config import ROOT_LOGGER_NAME
from textwfc.wfc import TileCatalog, build_rules, AdjacencyStrategy


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (skipped by default, run with --run-slow)")


def pytest_addoption(parser):
    """Add --run-slow option to pytest."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (skipped by default)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is passed."""
    if config.getoption("--run-slow"):
        return

    skip_slow = pytest.mark.skip(reason="Slow test (use --run-slow to run)")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def as_grid(*rows: str) -> list[list[str]]:
    """Build a symbol grid from row strings."""
    return [list(row) for row in rows]


# =============================================================================
# Samples
# =============================================================================

@pytest.fixture
def checkerboard_sample() -> list[list[str]]:
    """The two-row diagonal sample: A never touches A."""
    return as_grid("AB", "BA")


@pytest.fixture
def stripes_sample() -> list[list[str]]:
    """Horizontal stripes: rows of A alternate with rows of B."""
    return as_grid("AAAA", "BBBB", "AAAA", "BBBB")


@pytest.fixture
def open_sample() -> list[list[str]]:
    """Every ordered pair of A/B occurs in every direction, so nothing is forbidden."""
    return as_grid("AABB", "ABAB", "BBAA", "BABA")


@pytest.fixture
def single_row_sample() -> list[list[str]]:
    """One row: nothing is ever seen above or below any tile."""
    return as_grid("AB")


# =============================================================================
# Catalogs and rules
# =============================================================================

@pytest.fixture
def checkerboard_catalog(checkerboard_sample) -> TileCatalog:
    return TileCatalog(checkerboard_sample, 1, 1)


@pytest.fixture
def checkerboard_rules(checkerboard_catalog):
    return build_rules(checkerboard_catalog, AdjacencyStrategy.CO_OCCURRENCE)


# =============================================================================
# Filesystem
# =============================================================================

@pytest.fixture
def temp_data_dir() -> Path:
    """Create a temporary data directory for tests."""
    with tempfile.TemporaryDirectory(prefix="textwfc_test_") as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def reset_logging():
    """Drop handlers that setup_logging attached during a test."""
    yield
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()
