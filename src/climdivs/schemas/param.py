"""ParamConfig: Expert defaults for the climate divisions pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from climdivs.constants import MISSING_SENTINEL, NO_DIVISION_TOKENS
from climdivs.schemas.base import ClimdivsBaseModel
from climdivs.schemas.geometry import GridGeometry
from climdivs.divisions.units import parse_conversion


# =============================================================================
# Nested Configuration Models
# =============================================================================

class PathsConfig(ClimdivsBaseModel):
    """Static input and output locations."""
    division_map: str = Field(
        "data/CONUS_0.125deg_climdivs.txt",
        description="Pipe-delimited lon|lat|division gridpoint map",
    )
    base_dir: str = Field(".", description="Directory holding logs/ and work/")


class RunConfig(ClimdivsBaseModel):
    """Per-run inputs (usually supplied on the command line)."""
    ctl: Optional[str] = None
    grid: Optional[str] = None
    date: Optional[str] = None
    output: Optional[str] = None


class GridConfig(ClimdivsBaseModel):
    """Reference grid settings."""
    sentinel: float = Field(MISSING_SENTINEL, description="Missing value")
    geometry: Optional[GridGeometry] = None
    byte_order: Literal["little"] = "little"

    @field_validator("sentinel", mode="before")
    @classmethod
    def coerce_sentinel_to_float(cls, v):
        """Allow int or float for sentinel."""
        return float(v)


class DivisionsConfig(ClimdivsBaseModel):
    """Division map parsing settings."""
    no_division_tokens: list[str] = Field(default_factory=lambda: list(NO_DIVISION_TOKENS))
    cache_map: bool = True


class OutputConfig(ClimdivsBaseModel):
    """Report formatting."""
    precision: int = Field(2, ge=0, le=10, description="Decimals written for every value")


class ConversionConfig(ClimdivsBaseModel):
    """Unit conversion applied to non-missing averages."""
    spec: Optional[str] = None

    @field_validator("spec")
    @classmethod
    def check_spec(cls, v):
        """Reject specs that are not 'k,m', 'M' or 'M,N'."""
        if v is not None:
            parse_conversion(v)
        return v


class RegridderConfig(ClimdivsBaseModel):
    """External GrADS regridding."""
    grads_executable: str = "grads"
    timeout_sec: int = Field(600, ge=1)
    keep_work_files: bool = False


class LoggingConfig(ClimdivsBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(ClimdivsBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    divisions: DivisionsConfig = Field(default_factory=DivisionsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    regridder: RegridderConfig = Field(default_factory=RegridderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
