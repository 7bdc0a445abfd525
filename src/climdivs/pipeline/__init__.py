"""Pipeline modules.

- processor: Decode, aggregate, convert and write one grid
- orchestrator: Logging, work directory, optional regridding
"""

from climdivs.pipeline.processor import ClimateDivisionProcessor
from climdivs.pipeline.orchestrator import PipelineOrchestrator, setup_logging

__all__ = [
    "ClimateDivisionProcessor",
    "PipelineOrchestrator",
    "setup_logging",
]
