"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized and frozen. Runtime code reads fields directly, never with .get().
"""

from typing import Literal, Optional
from pydantic import ConfigDict, field_validator
from climdivs.schemas.base import ClimdivsBaseModel
from climdivs.schemas.geometry import GridGeometry
from climdivs.divisions.units import parse_conversion


_FROZEN = ConfigDict(
    extra='forbid',
    validate_assignment=True,
    str_strip_whitespace=True,
    frozen=True,
)


class InternalPathsConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    division_map: str
    base_dir: str


class InternalRunConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    ctl: Optional[str]
    grid: Optional[str]
    date: Optional[str]
    output: Optional[str]


class InternalGridConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    sentinel: float
    geometry: Optional[GridGeometry]
    byte_order: Literal["little"]


class InternalDivisionsConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    no_division_tokens: tuple[str, ...]
    cache_map: bool


class InternalOutputConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    precision: int


class InternalConversionConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    spec: Optional[str]

    @field_validator("spec")
    @classmethod
    def check_spec(cls, v):
        if v is not None:
            parse_conversion(v)
        return v


class InternalRegridderConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    grads_executable: str
    timeout_sec: int
    keep_work_files: bool


class InternalLoggingConfig(ClimdivsBaseModel):
    model_config = _FROZEN
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class InternalConfig(ClimdivsBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.sentinel = config.grid.sentinel  # NOT .get()
            self.precision = config.output.precision
    """

    paths: InternalPathsConfig
    run: InternalRunConfig
    grid: InternalGridConfig
    divisions: InternalDivisionsConfig
    output: InternalOutputConfig
    conversion: InternalConversionConfig
    regridder: InternalRegridderConfig
    logging: InternalLoggingConfig

    model_config = _FROZEN
