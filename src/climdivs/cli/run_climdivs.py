"""Core grid-to-climdivs execution logic.

This module contains the actual runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import argparse
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pydantic

from climdivs.contracts.failure import ClimdivsError
from climdivs.pipeline.orchestrator import PipelineOrchestrator
from climdivs.schemas import CLIConfig, ParamConfig, UserConfig, resolve_config
from climdivs.setup_directories import setup_output_directories


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_BAD_CONFIG = 2


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_grid_to_climdivs(
    user_config: Optional[Union[str, Dict[str, Any]]] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
) -> Path:
    """Resolve configuration and run one grid-to-climdivs job.

    Parameters
    ----------
    user_config : str or dict, optional
        Path to a user config file (Python file with CONFIG dict), or the
        CONFIG dict itself.
    cli_args : dict, optional
        CLI overrides. Keys: ctl, grid, date, output, unit_conversion,
        division_map, base_dir, log_level. None values are ignored.
    verbose : bool, optional
        If True, enable DEBUG logging and print the resolved config.

    Returns
    -------
    Path
        The written report.

    Examples
    --------
    Regrid a GrADS dataset and convert Kelvin to Fahrenheit::

        run_grid_to_climdivs(
            "config/user_config.py",
            cli_args={"ctl": "tmax.ctl", "date": "20180919",
                      "output": "tmax_20180919.txt", "unit_conversion": "k,m"},
        )
    """
    param_cfg = ParamConfig()

    user_cfg = UserConfig()
    if isinstance(user_config, (str, Path)):
        user_config = load_user_config_dict(user_config)
    if user_config is not None:
        user_cfg = UserConfig.model_validate(user_config)

    cli_args = dict(cli_args or {})
    if verbose and not cli_args.get("log_level"):
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    output_dirs = setup_output_directories(config.paths.base_dir)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('=' * 60)

    orchestrator = PipelineOrchestrator(config, output_dirs)
    return orchestrator.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grid-to-climdivs",
        description="Average gridded data over the 344 CONUS climate divisions",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-c", "--ctl", help="GrADS data descriptor file to regrid")
    source.add_argument("--grid", help="Binary grid already on the reference grid (skips regridding)")
    parser.add_argument("-d", "--date", help="Valid date of the grid (yyyymmdd)")
    parser.add_argument("-o", "--output", required=True, help="Output filename")
    parser.add_argument(
        "-u", "--unit-conversion",
        help="Unit conversion: 'k,m' (Kelvin to Fahrenheit), 'M' (new = M*old) "
             "or 'M,N' (new = M*old + N)",
    )
    parser.add_argument("--config", help="User config file (Python file with CONFIG dict)")
    parser.add_argument("--division-map", help="Override the division map file")
    parser.add_argument("--base-dir", help="Directory for logs/ and work/")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[list] = None) -> int:
    """Console entrypoint. Returns the process exit status.

    Run failures return 1 and invalid configuration returns 2. Anything else
    is a bug and propagates with its traceback.
    """
    args = build_parser().parse_args(argv)

    cli_args = {
        "ctl": args.ctl,
        "grid": args.grid,
        "date": args.date,
        "output": args.output,
        "unit_conversion": args.unit_conversion,
        "division_map": args.division_map,
        "base_dir": args.base_dir,
    }

    user_config = None
    if args.config is not None:
        try:
            user_config = load_user_config_dict(args.config)
        except (FileNotFoundError, ValueError) as e:
            print(f"grid-to-climdivs: invalid configuration: {e}", file=sys.stderr)
            return EXIT_BAD_CONFIG

    try:
        output = run_grid_to_climdivs(user_config, cli_args, verbose=args.verbose)
    except ClimdivsError as e:
        logger.error("Run failed: %s", e)
        print(f"grid-to-climdivs: {e}", file=sys.stderr)
        return EXIT_RUN_FAILED
    except pydantic.ValidationError as e:
        print(f"grid-to-climdivs: invalid configuration: {e}", file=sys.stderr)
        return EXIT_BAD_CONFIG

    print(f"Wrote {output}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
