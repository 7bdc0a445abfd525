"""Decode raw binary grids into ordered float samples.

The regridding step writes one little-endian IEEE-754 float32 per gridpoint,
in row-major order (lat outer, lon inner), with no header or record markers.
This module turns such a buffer into a read-only GriddedField.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import xarray as xr

from climdivs.contracts.base import require
from climdivs.contracts.failure import FormatError
from climdivs.schemas.geometry import GridGeometry

__all__ = ['GriddedField', 'decode_grid', 'read_grid_file', 'GRID_DTYPE']

logger = logging.getLogger(__name__)

GRID_DTYPE = np.dtype("<f4")


@dataclass(frozen=True)
class GriddedField:
    """Ordered gridpoint samples, optionally tied to a declared geometry.

    ``values`` is a read-only 1-D float32 array. Sample ``i`` corresponds to
    row ``i`` of the division map.
    """

    values: np.ndarray
    geometry: Optional[GridGeometry] = None

    def __len__(self) -> int:
        return int(self.values.shape[0])

    def to_dataarray(self, name: str = "grid") -> xr.DataArray:
        """Reshape to a (lat, lon) DataArray using the declared geometry."""
        require(
            self.geometry is not None,
            "Grid has no declared geometry; cannot reshape to lat/lon",
            FormatError,
        )
        lats = self.geometry.lats()
        lons = self.geometry.lons()
        return xr.DataArray(
            self.values.reshape(self.geometry.shape),
            dims=("lat", "lon"),
            coords={"lat": lats, "lon": lons},
            name=name,
        )

    @classmethod
    def from_dataarray(cls, da: xr.DataArray, geometry: Optional[GridGeometry] = None) -> "GriddedField":
        """Flatten a 2-D (lat, lon) DataArray in row-major order.

        Latitude is sorted ascending and longitude ascending before flattening,
        so the order matches the division map file.
        """
        require(
            set(da.dims) == {"lat", "lon"},
            f"Grid DataArray must have dims ('lat', 'lon'), got {da.dims}",
            FormatError,
        )
        da = da.transpose("lat", "lon").sortby("lat").sortby("lon")
        if geometry is not None:
            require(
                da.shape == geometry.shape,
                f"Grid DataArray shape {da.shape} does not match geometry {geometry.shape}",
                FormatError,
            )
        values = np.ascontiguousarray(da.values, dtype=np.float32).ravel()
        values.setflags(write=False)
        return cls(values=values, geometry=geometry)


def decode_grid(buffer: bytes, geometry: Optional[GridGeometry] = None) -> GriddedField:
    """Decode a raw float32 buffer.

    Parameters
    ----------
    buffer : bytes
        Raw grid bytes, one little-endian float32 per gridpoint.
    geometry : GridGeometry, optional
        Declared geometry of the grid. If given, the sample count must
        equal ``geometry.size``.

    Returns
    -------
    GriddedField
        Read-only samples in file order.

    Raises
    ------
    FormatError
        If the buffer is empty, its length is not a multiple of 4, or it
        does not hold exactly ``geometry.size`` samples.
    """
    nbytes = len(buffer)
    require(nbytes > 0, "Grid buffer is empty", FormatError)
    require(
        nbytes % GRID_DTYPE.itemsize == 0,
        f"Grid buffer length {nbytes} is not a multiple of {GRID_DTYPE.itemsize} bytes",
        FormatError,
    )

    values = np.frombuffer(buffer, dtype=GRID_DTYPE).copy()
    values.setflags(write=False)

    if geometry is not None:
        require(
            values.size == geometry.size,
            f"Grid holds {values.size} samples but geometry declares {geometry.size} "
            f"({geometry.nlat} lat x {geometry.nlon} lon)",
            FormatError,
        )

    logger.debug("Decoded %d grid samples", values.size)
    return GriddedField(values=values, geometry=geometry)


def read_grid_file(path: Path | str, geometry: Optional[GridGeometry] = None) -> GriddedField:
    """Read a binary grid file fully into memory and decode it."""
    path = Path(path)
    require(path.is_file(), f"Grid file not found: {path}", FormatError)
    field = decode_grid(path.read_bytes(), geometry)
    logger.info("Read grid file %s (%d samples)", path, len(field))
    return field
