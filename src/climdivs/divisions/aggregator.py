"""Average gridpoint values over climate divisions.

One pass over the grid accumulates a float64 sum and a count per division.
Only samples that are finite and strictly greater than the missing sentinel
contribute; gridpoints outside every division are ignored.
"""

import logging
from typing import NamedTuple, Sequence, Union

import numpy as np
import pandas as pd

from climdivs.contracts.base import require
from climdivs.contracts.failure import ConfigError, SizeMismatchError
from climdivs.constants import (
    DIVISION_IDS,
    MISSING_SENTINEL,
    N_DIVISIONS,
    NO_DIVISION,
)
from climdivs.divisions.map_loader import DivisionMap
from climdivs.grid.decoder import GriddedField

__all__ = [
    'DivisionTotals',
    'aggregate',
    'compute_averages',
    'aggregate_to_divisions',
]

logger = logging.getLogger(__name__)

GridLike = Union[GriddedField, np.ndarray, Sequence[float]]
MapLike = Union[DivisionMap, np.ndarray, Sequence[int]]


class DivisionTotals(NamedTuple):
    """Running total for one division."""
    sum: float
    count: int


def _grid_values(grid: GridLike) -> np.ndarray:
    if isinstance(grid, GriddedField):
        return grid.values.astype(np.float64)
    return np.asarray(grid, dtype=np.float64).ravel()


def _map_codes(division_map: MapLike) -> np.ndarray:
    if isinstance(division_map, DivisionMap):
        return division_map.codes
    codes = np.asarray(division_map, dtype=np.int64).ravel()
    require(
        bool(((codes >= NO_DIVISION) & (codes <= N_DIVISIONS)).all()),
        f"Division codes must be {NO_DIVISION} (no division) or 1..{N_DIVISIONS}",
        ConfigError,
    )
    return codes


def _check_alignment(grid: GridLike, division_map: MapLike, n_grid: int, n_map: int) -> None:
    require(
        n_grid == n_map,
        f"Grid has {n_grid} samples but division map has {n_map} gridpoints",
        SizeMismatchError,
    )
    grid_geom = getattr(grid, "geometry", None)
    map_geom = getattr(division_map, "geometry", None)
    if grid_geom is not None and map_geom is not None:
        require(
            grid_geom == map_geom,
            f"Grid geometry {grid_geom!r} does not match division map geometry {map_geom!r}",
            SizeMismatchError,
        )


def aggregate(
    grid: GridLike,
    division_map: MapLike,
    sentinel: float = MISSING_SENTINEL,
) -> dict[int, DivisionTotals]:
    """Accumulate sum and count of valid samples per division.

    Parameters
    ----------
    grid : GriddedField or array-like
        Gridpoint samples in grid order.
    division_map : DivisionMap or array-like of int
        Division id per gridpoint, 0 for no division.
    sentinel : float, optional
        Missing value. Samples equal to or below it, and non-finite samples,
        are skipped.

    Returns
    -------
    dict of int to DivisionTotals
        One entry per division present in the map, including divisions whose
        gridpoints were all missing (count 0).

    Raises
    ------
    SizeMismatchError
        If the grid and the map differ in length or declared geometry. Raised
        before any accumulation.
    """
    values = _grid_values(grid)
    codes = _map_codes(division_map)
    _check_alignment(grid, division_map, values.size, codes.size)

    in_division = codes != NO_DIVISION
    with np.errstate(invalid="ignore"):
        valid = in_division & np.isfinite(values) & (values > sentinel)

    sums = np.bincount(codes[valid], weights=values[valid], minlength=N_DIVISIONS + 1)
    counts = np.bincount(codes[valid], minlength=N_DIVISIONS + 1)

    present = np.unique(codes[in_division])
    totals = {int(d): DivisionTotals(float(sums[d]), int(counts[d])) for d in present}

    logger.debug(
        "Aggregated %d of %d gridpoints into %d divisions (%d gridpoints outside divisions)",
        int(valid.sum()), values.size, len(totals), int((~in_division).sum()),
    )
    return totals


def compute_averages(
    totals: dict[int, DivisionTotals],
    sentinel: float = MISSING_SENTINEL,
) -> dict[int, float]:
    """Mean of each division, or the sentinel when no sample was valid."""
    return {
        division: (t.sum / t.count if t.count > 0 else float(sentinel))
        for division, t in totals.items()
    }


def aggregate_to_divisions(
    grid: GridLike,
    division_map: MapLike,
    sentinel: float = MISSING_SENTINEL,
) -> pd.Series:
    """Average the grid over every division id 1..344.

    Divisions absent from the map are reported with the sentinel.
    """
    averages = compute_averages(aggregate(grid, division_map, sentinel), sentinel)
    series = pd.Series(averages, dtype=np.float64).reindex(DIVISION_IDS, fill_value=float(sentinel))
    series.index.name = "division"
    series.name = "value"

    n_missing = int((series == sentinel).sum())
    if n_missing == N_DIVISIONS:
        logger.warning("All %d divisions are missing", N_DIVISIONS)
    else:
        logger.info("Computed averages for %d divisions (%d missing)", N_DIVISIONS - n_missing, n_missing)
    return series
