"""Climate division processing pipeline.

Runs one grid through the core stages:

1. **Decode**: raw little-endian float32 bytes into a read-only GriddedField.
2. **Division map**: load (or reuse from the process-wide cache) the
   gridpoint-to-division lookup table.
3. **Aggregate**: one pass summing valid samples per division, then averages;
   divisions without valid samples get the missing sentinel.
4. **Convert** (optional): apply the configured unit conversion to every
   non-missing average.
5. **Format & write**: 344 ``"<id> <value>"`` lines, written atomically.

Every stage validates its inputs and raises before anything is written, so a
failed run never leaves a partial report.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from climdivs.contracts import assert_decoded, assert_division_map, assert_report
from climdivs.divisions.aggregator import aggregate_to_divisions
from climdivs.divisions.formatter import format_records, write_records
from climdivs.divisions.map_loader import DIVISION_MAP_CACHE, DivisionMap, load_division_map
from climdivs.divisions.units import convert_units
from climdivs.grid.decoder import GriddedField, decode_grid, read_grid_file

if TYPE_CHECKING:
    from climdivs.schemas import InternalConfig

__all__ = ['ClimateDivisionProcessor']

logger = logging.getLogger(__name__)


class ClimateDivisionProcessor:
    """Turn reference-grid data into the climate division report.

    Parameters
    ----------
    config : InternalConfig
        Fully validated runtime configuration. The processor reads
        ``paths.division_map``, ``grid``, ``divisions``, ``conversion`` and
        ``output``.

    Examples
    --------
    >>> processor = ClimateDivisionProcessor(config)
    >>> report = processor.process_file("work/regridded.bin")
    >>> processor.write(report, "tmax_20180919.txt")
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.sentinel = config.grid.sentinel
        self.geometry = config.grid.geometry
        self.precision = config.output.precision
        self.conversion = config.conversion.spec
        self._division_map = None

    @property
    def division_map(self) -> DivisionMap:
        """The division map for this configuration, loaded on first use."""
        if self._division_map is None:
            loader_kwargs = dict(
                sentinel=self.sentinel,
                no_division_tokens=self.config.divisions.no_division_tokens,
                geometry=self.geometry,
            )
            path = self.config.paths.division_map
            if self.config.divisions.cache_map:
                dmap = DIVISION_MAP_CACHE.get(path, **loader_kwargs)
            else:
                dmap = load_division_map(path, **loader_kwargs)
            assert_division_map(dmap)
            self._division_map = dmap
        return self._division_map

    def process_grid(self, field: GriddedField) -> pd.Series:
        """Average, convert and validate one decoded grid.

        Returns
        -------
        pd.Series
            Values indexed by division id 1..344, sentinel where missing.
        """
        assert_decoded(field)
        dmap = self.division_map

        report = aggregate_to_divisions(field, dmap, self.sentinel)
        report = convert_units(report, self.conversion, self.sentinel)

        assert_report(report, self.sentinel)
        return report

    def process_buffer(self, buffer: bytes) -> pd.Series:
        return self.process_grid(decode_grid(buffer, self.geometry))

    def process_file(self, grid_path: Path | str) -> pd.Series:
        return self.process_grid(read_grid_file(grid_path, self.geometry))

    def format(self, report: pd.Series) -> list[str]:
        return format_records(report, self.sentinel, self.precision)

    def write(self, report: pd.Series, output_path: Path | str) -> Path:
        return write_records(self.format(report), output_path)

    def run(self, grid_path: Path | str, output_path: Path | str) -> Path:
        """Process ``grid_path`` and write the report to ``output_path``."""
        logger.info("Processing grid %s", grid_path)
        report = self.process_file(grid_path)
        return self.write(report, output_path)
