"""Optional unit conversion of division averages.

Conversion specs:

    k,m     Kelvin to degrees Fahrenheit
    M       new = M * old
    M,N     new = M * old + N

Missing (sentinel) averages are never converted.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import pandas as pd

from climdivs.contracts.failure import ValidationError
from climdivs.constants import MISSING_SENTINEL

__all__ = [
    'UnitConversion',
    'LinearConversion',
    'KelvinToFahrenheit',
    'parse_conversion',
    'convert_units',
]

logger = logging.getLogger(__name__)

KELVIN_TO_FAHRENHEIT_SPEC = ("k", "m")

Averages = Union[pd.Series, dict[int, float]]


class UnitConversion:
    """Base class for conversions applied to non-missing averages."""

    def convert(self, values: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def apply(self, averages: Averages, sentinel: float = MISSING_SENTINEL) -> Averages:
        """Convert every entry except sentinels; returns the same container type."""
        if isinstance(averages, pd.Series):
            series = averages.astype(np.float64)
            mask = series != sentinel
            out = series.copy()
            out[mask] = self.convert(series[mask].to_numpy())
            return out
        return {
            division: (value if value == sentinel else float(self.convert(np.float64(value))))
            for division, value in averages.items()
        }


@dataclass(frozen=True)
class LinearConversion(UnitConversion):
    """new = scale * old + offset"""
    scale: float
    offset: float = 0.0

    def convert(self, values):
        return self.scale * values + self.offset


@dataclass(frozen=True)
class KelvinToFahrenheit(UnitConversion):
    """new = (old - 273.15) * 9/5 + 32"""

    def convert(self, values):
        return (values - 273.15) * 9.0 / 5.0 + 32.0


def _parse_number(token: str, spec: str) -> float:
    try:
        value = float(token)
    except ValueError:
        raise ValidationError(
            f"Unit conversion {spec!r}: parameter {token!r} is not a number"
        ) from None
    if not math.isfinite(value):
        raise ValidationError(f"Unit conversion {spec!r}: parameter {token!r} is not finite")
    return value


def parse_conversion(spec: str) -> UnitConversion:
    """Parse a ``"k,m"``, ``"M"`` or ``"M,N"`` conversion spec.

    Raises
    ------
    ValidationError
        If the spec matches none of the three forms.

    Examples
    --------
    >>> parse_conversion("k,m")
    KelvinToFahrenheit()
    >>> parse_conversion("0.0393701")
    LinearConversion(scale=0.0393701, offset=0.0)
    >>> parse_conversion("1.8,-459.67")
    LinearConversion(scale=1.8, offset=-459.67)
    """
    if not isinstance(spec, str) or not spec.strip():
        raise ValidationError(f"Unit conversion spec must be a non-empty string, got {spec!r}")

    tokens = [t.strip() for t in spec.split(",")]
    if tuple(t.lower() for t in tokens) == KELVIN_TO_FAHRENHEIT_SPEC:
        return KelvinToFahrenheit()

    if len(tokens) == 1:
        return LinearConversion(scale=_parse_number(tokens[0], spec))
    if len(tokens) == 2:
        return LinearConversion(
            scale=_parse_number(tokens[0], spec),
            offset=_parse_number(tokens[1], spec),
        )
    raise ValidationError(
        f"Unit conversion {spec!r} must be 'k,m', 'M' or 'M,N' ({len(tokens)} parameters given)"
    )


def convert_units(
    averages: Averages,
    spec: Optional[str],
    sentinel: float = MISSING_SENTINEL,
) -> Averages:
    """Parse ``spec`` and apply it; ``spec=None`` returns the averages unchanged."""
    if spec is None:
        return averages
    conversion = parse_conversion(spec)
    logger.info("Applying unit conversion %r (%s)", spec, conversion)
    return conversion.apply(averages, sentinel)
