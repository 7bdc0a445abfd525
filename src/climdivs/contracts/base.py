"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all stage
checks. Input validation passes the error class to raise; stage-boundary
contracts use the default ContractViolation.
"""

from typing import Type

from climdivs.contracts.failure import ClimdivsError, ContractViolation


def require(
    condition: bool,
    message: str,
    error: Type[ClimdivsError] = ContractViolation,
) -> None:
    """Enforce a pipeline precondition or contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.

    message : str
        Error message naming the input and the violated invariant.

    error : type, optional
        ClimdivsError subclass to raise. Defaults to ContractViolation.

    Raises
    ------
    ClimdivsError
        If condition is False.

    Examples
    --------
    >>> require(len(buf) % 4 == 0, "Grid buffer length not a multiple of 4", FormatError)
    >>> require(len(report) == 344, "Report contract: 344 divisions expected")
    """
    if not condition:
        raise error(message)
