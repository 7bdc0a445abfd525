"""Pydantic configuration schemas for the climate divisions pipeline.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
GridGeometry : class
    Declared reference grid geometry
"""

from climdivs.schemas.geometry import GridGeometry
from climdivs.schemas.resolve import resolve_config
from climdivs.schemas.internal import InternalConfig
from climdivs.schemas.param import ParamConfig
from climdivs.schemas.user import UserConfig
from climdivs.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'GridGeometry',
]
