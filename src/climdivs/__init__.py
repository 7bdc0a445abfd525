"""`climdivs` - Gridded data to climate division averages.

Subpackages:
- grid: Binary grid decoding
- divisions: Division map loading, aggregation, unit conversion, report output
- pipeline: Processor and orchestrator
- regrid: External GrADS regridding

Authors: Climate division tools developers
"""

__version__ = "0.1.0"
