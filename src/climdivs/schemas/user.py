"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with upper-case
aliases for the common settings (e.g., DIVISION_MAP -> division_map,
UNIT_CONVERSION -> conversion spec).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Any, Literal, Optional
from pydantic import Field, field_validator
from climdivs.schemas.base import ClimdivsBaseModel
from climdivs.schemas.geometry import GridGeometry


class UserGridConfig(ClimdivsBaseModel):
    """User-facing grid config."""
    sentinel: Optional[float] = None
    geometry: Optional[GridGeometry] = None


class UserRegridderConfig(ClimdivsBaseModel):
    """User-facing regridder config."""
    grads_executable: Optional[str] = None
    timeout_sec: Optional[int] = None
    keep_work_files: Optional[bool] = None


class UserConfig(ClimdivsBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            DIVISION_MAP="/data/maps/CONUS_0.125deg_climdivs.txt",
            BASE_DIR="/data/grid-to-climdivs",
            UNIT_CONVERSION="k,m",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Paths
    division_map: Optional[str] = Field(None, alias="DIVISION_MAP")
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")

    # Grid
    sentinel: Optional[float] = Field(None, alias="MISSING_VALUE")
    geometry: Optional[GridGeometry] = Field(None, alias="GRID_GEOMETRY")
    no_division_tokens: Optional[list[str]] = Field(None, alias="NO_DIVISION_TOKENS")

    # Output
    precision: Optional[int] = Field(None, alias="PRECISION", ge=0, le=10)
    unit_conversion: Optional[str] = Field(None, alias="UNIT_CONVERSION")

    # External tools
    grads_executable: Optional[str] = Field(None, alias="GRADS")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    grid: Optional[UserGridConfig] = None
    regridder: Optional[UserRegridderConfig] = None

    model_config = ClimdivsBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("sentinel", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict[str, Any]:
        """Convert user config to the nested InternalConfig structure.

        Nested sections are applied first; flat aliases win over them.
        """
        overrides: dict[str, Any] = {}

        def section(name):
            return overrides.setdefault(name, {})

        if self.grid is not None:
            section("grid").update(self.grid.model_dump(exclude_none=True))
        if self.regridder is not None:
            section("regridder").update(self.regridder.model_dump(exclude_none=True))

        if self.division_map is not None:
            section("paths")["division_map"] = self.division_map
        if self.base_dir is not None:
            section("paths")["base_dir"] = self.base_dir
        if self.sentinel is not None:
            section("grid")["sentinel"] = self.sentinel
        if self.geometry is not None:
            section("grid")["geometry"] = self.geometry.model_dump()
        if self.no_division_tokens is not None:
            section("divisions")["no_division_tokens"] = list(self.no_division_tokens)
        if self.precision is not None:
            section("output")["precision"] = self.precision
        if self.unit_conversion is not None:
            section("conversion")["spec"] = self.unit_conversion
        if self.grads_executable is not None:
            section("regridder")["grads_executable"] = self.grads_executable
        if self.log_level is not None:
            section("logging")["level"] = self.log_level

        return {k: v for k, v in overrides.items() if v}
