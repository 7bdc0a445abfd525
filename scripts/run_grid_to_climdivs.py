#!/usr/bin/env python3
"""grid-to-climdivs runner.

Usage:
    python scripts/run_grid_to_climdivs.py -c tmax.ctl -d 20180919 -o tmax_20180919.txt -u k,m
    python scripts/run_grid_to_climdivs.py --grid regridded.bin -o out.txt --config scripts/user_config.py

Note: User config in scripts/user_config.py, expert defaults in climdivs.schemas.param
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from climdivs.cli.run_climdivs import main


if __name__ == "__main__":
    sys.exit(main())
