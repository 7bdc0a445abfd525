"""Command-line interface modules for grid-to-climdivs.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from climdivs.cli.run_climdivs import main, run_grid_to_climdivs

__all__ = ['main', 'run_grid_to_climdivs']
