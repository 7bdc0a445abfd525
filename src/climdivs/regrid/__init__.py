"""External regridding onto the reference grid.

- grads: GrADS batch-mode regridding to a little-endian float32 grid
"""

from climdivs.regrid.grads import GradsRegridder, grads_time

__all__ = ["GradsRegridder", "grads_time"]
