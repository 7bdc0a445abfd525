"""Formal pipeline invariants.

This file documents what each stage MUST produce. Use it as a reviewer
anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "grid": [
        "Buffer is non-empty and a multiple of 4 bytes",
        "Samples are little-endian float32, decoded into a read-only 1-D array",
        "With a declared geometry, sample count equals nlat * nlon",
    ],

    "division_map": [
        "Header has three columns (lon|lat|division)",
        "Every data line has three fields",
        "Codes are 0 (no division) or 1..344",
        "With a declared geometry, rows are its row-major gridpoints",
        "Map is immutable after load",
    ],

    "aggregation": [
        "Grid length equals map length, checked before accumulation",
        "Declared geometries, when both present, are equal",
        "Only finite samples strictly greater than the sentinel contribute",
        "Sums are float64; counts never decrease",
        "count == 0 yields the sentinel",
    ],

    "conversion": [
        "Spec is 'k,m', 'M' or 'M,N'",
        "Sentinel values pass through unchanged",
    ],

    "report": [
        "Exactly 344 lines, ids ascending 1..344",
        "Every value printed with the same fixed precision",
        "Written atomically; a failed run leaves no output file",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "regrid": "OPTIONAL",      # Skipped when a binary grid is supplied
    "grid": "REQUIRED",
    "division_map": "REQUIRED",
    "aggregation": "REQUIRED",
    "conversion": "OPTIONAL",  # Only with a conversion spec
    "report": "REQUIRED",
}
