"""CLIConfig: Command-line operational overrides.

Per-run settings parsed by argparse: the grid source (GrADS descriptor plus
date, or an already regridded binary grid), output path, unit conversion and
verbosity.
"""

from datetime import date, datetime, timedelta
from typing import Literal, Optional
from pydantic import field_validator, model_validator
from climdivs.schemas.base import ClimdivsBaseModel

DATE_FORMAT = "%Y%m%d"


def parse_run_date(value: str) -> date:
    """Parse a yyyymmdd run date, rejecting dates later than tomorrow.

    Raises
    ------
    ValueError
        If the date does not parse or is too recent.
    """
    try:
        day = datetime.strptime(str(value), DATE_FORMAT).date()
    except ValueError:
        raise ValueError(f"Date {value!r} is invalid, expected yyyymmdd") from None
    if day - timedelta(days=1) > date.today():
        raise ValueError(f"Date {value} is too recent")
    return day


class CLIConfig(ClimdivsBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            ctl="/data/tmax/tmax_20180919.ctl",
            date="20180919",
            output="/data/climdivs/tmax_20180919.txt",
            unit_conversion="k,m",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    ctl: Optional[str] = None
    grid: Optional[str] = None
    date: Optional[str] = None
    output: Optional[str] = None
    unit_conversion: Optional[str] = None
    division_map: Optional[str] = None
    base_dir: Optional[str] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, v):
        """Dates are yyyymmdd and not later than tomorrow."""
        if v is None:
            return v
        v = str(v).strip()
        parse_run_date(v)
        return v

    @model_validator(mode="after")
    def check_grid_source(self):
        """A GrADS descriptor needs a date; it cannot be combined with a binary grid."""
        if self.ctl is not None and self.grid is not None:
            raise ValueError("Pass either ctl or grid, not both")
        if self.ctl is not None and self.date is None:
            raise ValueError("A date is required with ctl")
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        run_overrides = {
            k: getattr(self, k)
            for k in ("ctl", "grid", "date", "output")
            if getattr(self, k) is not None
        }
        if run_overrides:
            overrides["run"] = run_overrides

        paths_overrides = {}
        if self.division_map is not None:
            paths_overrides["division_map"] = self.division_map
        if self.base_dir is not None:
            paths_overrides["base_dir"] = str(self.base_dir)
        if paths_overrides:
            overrides["paths"] = paths_overrides

        if self.unit_conversion is not None:
            overrides["conversion"] = {"spec": self.unit_conversion}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
