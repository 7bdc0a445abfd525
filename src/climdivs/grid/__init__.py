"""Binary grid decoding.

- decoder: Decode little-endian float32 buffers into GriddedField
"""

from climdivs.grid.decoder import GriddedField, decode_grid, read_grid_file

__all__ = [
    "GriddedField",
    "decode_grid",
    "read_grid_file",
]
