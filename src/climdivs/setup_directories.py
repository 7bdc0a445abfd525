"""
Directory setup for grid-to-climdivs runs.

    base/
        logs/   one log file per run date
        work/   scoped temporary regridding directories
"""

from pathlib import Path


def setup_output_directories(base_output_dir=None):
    """
    Set up the run directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base directory. Defaults to the current directory.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'logs', 'work'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd()

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "logs": base_output_dir / "logs",
        "work": base_output_dir / "work",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories
