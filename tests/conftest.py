"""Root-level pytest fixtures for the grid-to-climdivs test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus small on-disk inputs.
"""

import logging

import pytest
from pathlib import Path
import tempfile
import shutil

from climdivs.divisions.map_loader import DIVISION_MAP_CACHE
from climdivs.schemas import ParamConfig, UserConfig, resolve_config

from tests.helpers.fake_inputs import write_division_map, write_grid


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_precision(make_config):
    ...     config = make_config(precision=3)
    ...     assert config.output.precision == 3
    """
    def _make(cli=None, **user_overrides):
        user = UserConfig(**user_overrides) if user_overrides else None
        return resolve_config(param_config, user, cli)

    return _make


# =============================================================================
# Directory and Input Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture(autouse=True)
def clear_division_map_cache():
    DIVISION_MAP_CACHE.clear()
    yield
    DIVISION_MAP_CACHE.clear()


@pytest.fixture
def example_map(temp_dir):
    """Four gridpoints: three in division 5, one in division 7."""
    return write_division_map(temp_dir / "map.txt", [5, 5, 5, 7])


@pytest.fixture
def example_grid(temp_dir):
    return write_grid(temp_dir / "grid.bin", [10.0, 20.0, -9999.0, 30.0])


@pytest.fixture
def restore_root_logging():
    """Undo setup_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
