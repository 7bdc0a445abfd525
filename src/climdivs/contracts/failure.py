"""Centralized failure taxonomy for the climate divisions pipeline.

Every stage fails fast and once. All failures derive from ClimdivsError so
the command line can report them uniformly and exit non-zero.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """Failure policy for stage violations.

    FAIL_FAST (default): Raise immediately, write no output.
    """
    FAIL_FAST = "fail_fast"


class ClimdivsError(RuntimeError):
    """Base class for all fatal run errors."""
    pass


class FormatError(ClimdivsError):
    """Malformed binary grid input (empty buffer, wrong byte length)."""
    pass


class ConfigError(ClimdivsError):
    """Missing, corrupt or malformed division map file."""
    pass


class SizeMismatchError(ClimdivsError):
    """Grid and division map do not describe the same grid."""
    pass


class ValidationError(ClimdivsError, ValueError):
    """Malformed unit conversion specification."""
    pass


class ContractViolation(ClimdivsError):
    """Raised when a pipeline stage did not produce the invariants it promised.

    This indicates a bug in pipeline logic, not bad input.

    Key distinction:
    - FormatError / ConfigError / SizeMismatchError / ValidationError: bad input
    - ContractViolation: Pipeline bug (programmer error)
    """
    pass


class RegridError(ClimdivsError):
    """External regridding engine failed or produced no usable grid."""
    pass
