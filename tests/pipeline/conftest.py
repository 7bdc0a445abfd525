import pytest

from climdivs.schemas import CLIConfig
from climdivs.setup_directories import setup_output_directories


@pytest.fixture
def pipeline_output_dirs(temp_dir):
    """Output directories for pipeline tests."""
    return setup_output_directories(temp_dir / "run")


@pytest.fixture
def run_config(make_config, example_map, example_grid, temp_dir):
    """Config for a grid-mode run over the four-point example."""
    def _make(cli=None, **user_overrides):
        cli_args = {"grid": str(example_grid), "output": str(temp_dir / "out.txt")}
        cli_args.update(cli or {})
        return make_config(
            cli=CLIConfig(**cli_args),
            DIVISION_MAP=str(example_map),
            **user_overrides,
        )
    return _make

