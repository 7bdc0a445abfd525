"""Grid stage contract.

Enforces the guarantee that after decoding, the grid is a read-only
1-D float32 array ready for aggregation.
"""

import numpy as np

from climdivs.contracts.base import require


def assert_decoded(field) -> None:
    """Enforce grid stage contract.

    Called immediately after decoding.

    Parameters
    ----------
    field : GriddedField
        Output of decode_grid() or read_grid_file()

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    values = field.values
    require(
        values.ndim == 1,
        f"Grid contract violated: values have {values.ndim} dims, expected 1"
    )
    require(
        values.dtype == np.float32,
        f"Grid contract violated: dtype {values.dtype}, expected float32"
    )
    require(
        values.size > 0,
        "Grid contract violated: no samples"
    )
    require(
        not values.flags.writeable,
        "Grid contract violated: values are writeable"
    )
