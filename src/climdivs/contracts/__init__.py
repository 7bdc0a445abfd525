"""Pipeline contracts - fail-fast enforcement of stage invariants.

Input checks raise the specific error (FormatError, ConfigError,
SizeMismatchError, ValidationError). Stage-boundary checks raise
ContractViolation.
"""

from climdivs.contracts.failure import (
    ClimdivsError,
    ConfigError,
    ContractViolation,
    FailurePolicy,
    FormatError,
    RegridError,
    SizeMismatchError,
    ValidationError,
)
from climdivs.contracts.base import require
from climdivs.contracts.grid import assert_decoded
from climdivs.contracts.divisions import assert_division_map, assert_report

__all__ = [
    "ClimdivsError",
    "ConfigError",
    "ContractViolation",
    "FailurePolicy",
    "FormatError",
    "RegridError",
    "SizeMismatchError",
    "ValidationError",
    "require",
    "assert_decoded",
    "assert_division_map",
    "assert_report",
]
