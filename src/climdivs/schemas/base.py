"""Shared pydantic base for the climdivs configuration layers."""

from pydantic import BaseModel, ConfigDict


class ClimdivsBaseModel(BaseModel):
    """Base for param, CLI and internal configs.

    A misspelled key in a config section is rejected rather than silently
    ignored; UserConfig relaxes this for its top level only. Paths and tokens
    arrive from files and the command line, so surrounding whitespace is
    stripped.
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        str_strip_whitespace=True,
    )
