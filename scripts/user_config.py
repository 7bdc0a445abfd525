"""grid-to-climdivs user configuration.

Modify settings here to customize the run. Advanced settings are in
climdivs/schemas/param.py

Usage:
    python scripts/run_grid_to_climdivs.py --config scripts/user_config.py -c tmax.ctl -d 20180919 -o out.txt
"""

CONFIG = {
    # ========================================================================
    # INPUTS
    # ========================================================================
    "DIVISION_MAP": "data/CONUS_0.125deg_climdivs.txt",  # lon|lat|division, grid order
    "BASE_DIR": "./run",      # logs/ and work/ go here

    # ========================================================================
    # REFERENCE GRID (must match the division map row order)
    # ========================================================================
    "GRID_GEOMETRY": {
        "resolution": 0.125,
        "lon_min": -125.0,
        "lon_max": -67.0,
        "lat_min": 24.0,
        "lat_max": 50.0,
    },
    "MISSING_VALUE": -9999,

    # ========================================================================
    # OUTPUT
    # ========================================================================
    "PRECISION": 2,           # Decimals for every value
    "UNIT_CONVERSION": None,  # "k,m", "M" or "M,N"

    # ========================================================================
    # EXTERNAL TOOLS
    # ========================================================================
    "GRADS": "grads",
    "LOG_LEVEL": "INFO",
}
