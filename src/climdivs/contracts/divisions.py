"""Division map and report contracts.

The map contract holds after loading: codes are a read-only integer array in
{0} U {1..344}. The report contract holds before writing: exactly one
value per division id, ascending.
"""

import numpy as np
import pandas as pd

from climdivs.contracts.base import require
from climdivs.constants import DIVISION_IDS, N_DIVISIONS, NO_DIVISION


def assert_division_map(division_map) -> None:
    """Enforce division map contract.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    codes = division_map.codes
    require(
        np.issubdtype(codes.dtype, np.integer),
        f"Division map contract violated: dtype {codes.dtype}, expected integer"
    )
    require(
        codes.ndim == 1 and codes.size > 0,
        "Division map contract violated: expected a non-empty 1-D code array"
    )
    require(
        bool(((codes == NO_DIVISION) | ((codes >= 1) & (codes <= N_DIVISIONS))).all()),
        f"Division map contract violated: codes outside {{0}} U 1..{N_DIVISIONS}"
    )
    require(
        not codes.flags.writeable,
        "Division map contract violated: codes are writeable"
    )


def assert_report(report: pd.Series, sentinel: float) -> None:
    """Enforce report contract.

    Called after averaging and unit conversion, before formatting.

    Raises
    ------
    ContractViolation
        If the report does not cover 1..344 in order or holds non-finite values
    """
    require(
        isinstance(report, pd.Series),
        f"Report contract violated: output is {type(report)}, expected Series"
    )
    require(
        len(report) == N_DIVISIONS,
        f"Report contract violated: {len(report)} divisions, expected {N_DIVISIONS}"
    )
    require(
        bool((report.index.to_numpy() == DIVISION_IDS).all()),
        f"Report contract violated: index is not 1..{N_DIVISIONS} ascending"
    )
    require(
        bool(np.isfinite(report.to_numpy()).all()),
        "Report contract violated: non-finite values (missing must be the sentinel)"
    )
