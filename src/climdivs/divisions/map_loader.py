"""Load the gridpoint-to-climate-division lookup table.

The map file is pipe-delimited with one header line followed by one line per
gridpoint, listed in the same order the binary grid stores its samples::

    lon|lat|climdiv
    -124.750|24.000|
    -124.625|24.000|NA
    -80.125|25.250|86

Gridpoints outside every division carry a blank code or a recognized
no-division token and are stored as code 0.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from climdivs.contracts.base import require
from climdivs.contracts.failure import ConfigError
from climdivs.constants import (
    MISSING_SENTINEL,
    N_DIVISIONS,
    NO_DIVISION,
    NO_DIVISION_TOKENS,
)
from climdivs.schemas.geometry import GridGeometry

__all__ = ['DivisionMap', 'DivisionMapCache', 'load_division_map', 'DIVISION_MAP_CACHE']

logger = logging.getLogger(__name__)

MAP_DELIMITER = "|"
MAP_COLUMNS = ("lon", "lat", "division")


@dataclass(frozen=True)
class DivisionMap:
    """Read-only positional lookup from gridpoint index to division id.

    ``codes[i]`` is the division id (1..344) of gridpoint ``i``, or 0 when the
    gridpoint is outside every division.
    """

    codes: np.ndarray
    lons: np.ndarray
    lats: np.ndarray
    geometry: Optional[GridGeometry] = None
    source: Optional[Path] = None

    def __len__(self) -> int:
        return int(self.codes.shape[0])

    def division_ids(self) -> np.ndarray:
        """Sorted ids of the divisions that own at least one gridpoint."""
        ids = np.unique(self.codes)
        return ids[ids != NO_DIVISION]


def _read_table(path: Path) -> tuple[list[str], pd.DataFrame, np.ndarray]:
    """Read the header fields, the data rows and their file line numbers.

    Blank lines are ignored. Data rows keep the line number they had in the
    file so errors point at the offending line.
    """
    read_kwargs = dict(
        sep=MAP_DELIMITER,
        header=None,
        dtype=str,
        keep_default_na=False,
        encoding="ascii",
    )
    try:
        first = pd.read_csv(path, nrows=1, **read_kwargs)
        require(
            first.shape[1] == len(MAP_COLUMNS),
            f"Division map {path} header has {first.shape[1]} columns, "
            f"expected {len(MAP_COLUMNS)} (lon|lat|division)",
            ConfigError,
        )
        table = pd.read_csv(path, skip_blank_lines=False, **read_kwargs)
    except pd.errors.EmptyDataError:
        raise ConfigError(f"Division map {path} is empty") from None
    except pd.errors.ParserError as e:
        raise ConfigError(f"Division map {path} is malformed: {e}".rstrip()) from e

    table = table.apply(lambda col: col.str.strip())
    blank = (table.isna() | (table == "")).all(axis=1).to_numpy()
    filled = np.flatnonzero(~blank)
    require(filled.size > 0, f"Division map {path} is empty", ConfigError)

    header_row = int(filled[0])
    header = [str(field) for field in table.iloc[header_row]]
    data_rows = filled[1:]
    require(data_rows.size > 0, f"Division map {path} has a header but no gridpoints", ConfigError)

    rows = table.iloc[data_rows].reset_index(drop=True)
    rows.columns = list(MAP_COLUMNS)
    # header=None: row i is file line i + 1
    line_numbers = data_rows + 1

    short = rows.isna().any(axis=1).to_numpy()
    if short.any():
        i = int(np.flatnonzero(short)[0])
        raise ConfigError(
            f"Division map {path} line {line_numbers[i]}: expected {len(MAP_COLUMNS)} "
            f"'{MAP_DELIMITER}'-separated fields, got {int(rows.iloc[i].notna().sum())}"
        )
    return header, rows, line_numbers


def _parse_codes(
    raw: pd.Series,
    line_numbers: np.ndarray,
    path: Path,
    sentinel: float,
    no_division_tokens: Iterable[str],
) -> np.ndarray:
    """Map raw code strings to division ids, 0 for no division."""
    tokens = {t.strip().lower() for t in no_division_tokens}
    is_token = raw.str.lower().isin(tokens)

    numeric = pd.to_numeric(raw.where(~is_token), errors="coerce")
    bad = ~is_token & numeric.isna()
    if bad.any():
        i = int(np.flatnonzero(bad.to_numpy())[0])
        raise ConfigError(
            f"Division map {path} line {line_numbers[i]}: "
            f"division code {raw.iloc[i]!r} is not a number or a no-division token"
        )

    numeric = numeric.fillna(NO_DIVISION).to_numpy(dtype=np.float64)
    numeric = np.where(numeric == sentinel, float(NO_DIVISION), numeric)

    fractional = numeric != np.floor(numeric)
    out_of_range = (numeric != NO_DIVISION) & ((numeric < 1) | (numeric > N_DIVISIONS))
    bad = fractional | out_of_range
    if bad.any():
        i = int(np.flatnonzero(bad)[0])
        raise ConfigError(
            f"Division map {path} line {line_numbers[i]}: "
            f"division code {raw.iloc[i]!r} outside 1..{N_DIVISIONS}"
        )
    return numeric.astype(np.int32)


def _check_geometry(lons: np.ndarray, lats: np.ndarray, geometry: GridGeometry, path: Path) -> None:
    require(
        lons.size == geometry.size,
        f"Division map {path} has {lons.size} gridpoints but geometry declares "
        f"{geometry.size} ({geometry.nlat} lat x {geometry.nlon} lon)",
        ConfigError,
    )
    exp_lon, exp_lat = geometry.points()
    tol = geometry.resolution / 2.0
    off = (np.abs(lons - exp_lon) > tol) | (np.abs(lats - exp_lat) > tol)
    if off.any():
        i = int(np.flatnonzero(off)[0])
        raise ConfigError(
            f"Division map {path} row {i}: point ({lons[i]}, {lats[i]}) is not the "
            f"row-major gridpoint ({exp_lon[i]}, {exp_lat[i]}) of the declared geometry"
        )


def load_division_map(
    path: Path | str,
    *,
    sentinel: float = MISSING_SENTINEL,
    no_division_tokens: Iterable[str] = NO_DIVISION_TOKENS,
    geometry: Optional[GridGeometry] = None,
) -> DivisionMap:
    """Load and validate a division map file.

    Parameters
    ----------
    path : Path or str
        Pipe-delimited ``lon|lat|division`` file.
    sentinel : float, optional
        Missing value; a division code equal to it means no division.
    no_division_tokens : iterable of str, optional
        Case-insensitive codes meaning no division (blank included by default).
    geometry : GridGeometry, optional
        Declared grid geometry. If given, the rows must be exactly the
        row-major gridpoints of this geometry.

    Returns
    -------
    DivisionMap
        Read-only map; its length is the expected grid length for the run.

    Raises
    ------
    ConfigError
        If the file is missing, empty, or malformed, or a code falls outside
        the division universe.
    """
    path = Path(path)
    require(path.is_file(), f"Division map not found: {path}", ConfigError)
    try:
        header, df, line_numbers = _read_table(path)
    except UnicodeDecodeError as e:
        raise ConfigError(f"Division map {path} is not an ASCII text file: {e}") from e

    coords = df[["lon", "lat"]].apply(pd.to_numeric, errors="coerce")
    bad = coords.isna().any(axis=1).to_numpy()
    if bad.any():
        i = int(np.flatnonzero(bad)[0])
        raise ConfigError(
            f"Division map {path} line {line_numbers[i]}: "
            f"non-numeric coordinates {df.at[i, 'lon']!r}, {df.at[i, 'lat']!r}"
        )
    lons = coords["lon"].to_numpy(dtype=np.float64)
    lats = coords["lat"].to_numpy(dtype=np.float64)

    codes = _parse_codes(df["division"], line_numbers, path, sentinel, no_division_tokens)

    if geometry is not None:
        _check_geometry(lons, lats, geometry, path)

    for arr in (codes, lons, lats):
        arr.setflags(write=False)

    dmap = DivisionMap(codes=codes, lons=lons, lats=lats, geometry=geometry, source=path)
    logger.info(
        "Loaded division map %s: %d gridpoints, %d divisions (header: %s)",
        path, len(dmap), dmap.division_ids().size, MAP_DELIMITER.join(header),
    )
    return dmap


class DivisionMapCache:
    """Process-wide cache of loaded division maps.

    Maps are immutable, so one load can serve many runs. The key includes the
    file's modification time and the declared geometry; changing either loads
    the file again.
    """

    def __init__(self):
        self._maps: dict[tuple, DivisionMap] = {}

    def get(
        self,
        path: Path | str,
        *,
        sentinel: float = MISSING_SENTINEL,
        no_division_tokens: Iterable[str] = NO_DIVISION_TOKENS,
        geometry: Optional[GridGeometry] = None,
    ) -> DivisionMap:
        path = Path(path)
        require(path.is_file(), f"Division map not found: {path}", ConfigError)
        stat = path.stat()
        tokens = tuple(sorted(t.strip().lower() for t in no_division_tokens))
        key = (str(path.resolve()), stat.st_mtime_ns, stat.st_size, geometry, sentinel, tokens)

        dmap = self._maps.get(key)
        if dmap is None:
            dmap = load_division_map(
                path, sentinel=sentinel, no_division_tokens=tokens, geometry=geometry,
            )
            # Drop stale entries for the same file
            stale = [k for k in self._maps if k[0] == key[0]]
            for k in stale:
                del self._maps[k]
            self._maps[key] = dmap
        else:
            logger.debug("Division map cache hit: %s", path)
        return dmap

    def clear(self) -> None:
        self._maps.clear()

    def __len__(self) -> int:
        return len(self._maps)


DIVISION_MAP_CACHE = DivisionMapCache()
