"""GridGeometry: explicit description of the reference grid.

Both the binary grid and the division map may declare the geometry they were
built for. When both declare one, the aggregator requires them to be equal
instead of trusting positional alignment alone.
"""

from typing import Literal

import numpy as np
from pydantic import ConfigDict, Field, model_validator

from climdivs.schemas.base import ClimdivsBaseModel


class GridGeometry(ClimdivsBaseModel):
    """Regular lat/lon grid, iterated row-major (lat outer, lon inner).

    Rows run south to north and columns west to east, which is the order
    GrADS ``fwrite`` emits and the order the division map file lists its
    gridpoints in.

    Examples
    --------
    >>> geom = GridGeometry(resolution=0.5, lon_min=-100, lon_max=-99, lat_min=30, lat_max=30.5)
    >>> geom.nlon, geom.nlat, geom.size
    (3, 2, 6)
    """

    resolution: float = Field(0.125, gt=0, description="Grid spacing in degrees")
    lon_min: float = Field(..., ge=-360, le=360)
    lon_max: float = Field(..., ge=-360, le=360)
    lat_min: float = Field(..., ge=-90, le=90)
    lat_max: float = Field(..., ge=-90, le=90)
    ordering: Literal["row_major"] = "row_major"

    model_config = ConfigDict(
        extra='forbid',
        str_strip_whitespace=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def check_extent(self):
        """Bounds must be ordered and span a whole number of cells."""
        if self.lon_max < self.lon_min:
            raise ValueError(f"lon_max {self.lon_max} < lon_min {self.lon_min}")
        if self.lat_max < self.lat_min:
            raise ValueError(f"lat_max {self.lat_max} < lat_min {self.lat_min}")
        for name, lo, hi in (("lon", self.lon_min, self.lon_max),
                             ("lat", self.lat_min, self.lat_max)):
            steps = (hi - lo) / self.resolution
            if abs(steps - round(steps)) > 1e-6:
                raise ValueError(
                    f"{name} extent {lo}..{hi} is not a multiple of resolution {self.resolution}"
                )
        return self

    @property
    def nlon(self) -> int:
        return int(round((self.lon_max - self.lon_min) / self.resolution)) + 1

    @property
    def nlat(self) -> int:
        return int(round((self.lat_max - self.lat_min) / self.resolution)) + 1

    @property
    def shape(self) -> tuple[int, int]:
        """(nlat, nlon)"""
        return (self.nlat, self.nlon)

    @property
    def size(self) -> int:
        return self.nlat * self.nlon

    def lons(self) -> np.ndarray:
        return self.lon_min + self.resolution * np.arange(self.nlon, dtype=np.float64)

    def lats(self) -> np.ndarray:
        return self.lat_min + self.resolution * np.arange(self.nlat, dtype=np.float64)

    def points(self) -> tuple[np.ndarray, np.ndarray]:
        """Flattened (lon, lat) of every gridpoint in iteration order."""
        lon2d, lat2d = np.meshgrid(self.lons(), self.lats())
        return lon2d.ravel(), lat2d.ravel()
