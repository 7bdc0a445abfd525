"""Climate division processing modules.

- map_loader: Load the gridpoint-to-division lookup table
- aggregator: Per-division sums, counts and averages
- units: Optional unit conversion of averages
- formatter: ASCII report lines and atomic output
"""

from climdivs.divisions.map_loader import (
    DIVISION_MAP_CACHE,
    DivisionMap,
    DivisionMapCache,
    load_division_map,
)
from climdivs.divisions.aggregator import (
    DivisionTotals,
    aggregate,
    aggregate_to_divisions,
    compute_averages,
)
from climdivs.divisions.units import (
    KelvinToFahrenheit,
    LinearConversion,
    UnitConversion,
    convert_units,
    parse_conversion,
)
from climdivs.divisions.formatter import format_records, write_records

__all__ = [
    "DIVISION_MAP_CACHE",
    "DivisionMap",
    "DivisionMapCache",
    "load_division_map",
    "DivisionTotals",
    "aggregate",
    "aggregate_to_divisions",
    "compute_averages",
    "KelvinToFahrenheit",
    "LinearConversion",
    "UnitConversion",
    "convert_units",
    "parse_conversion",
    "format_records",
    "write_records",
]
