"""Pipeline orchestrator for one grid-to-climdivs run.

Owns everything around the core processor: logging setup, the scoped work
directory, the optional GrADS regridding step, and the final report path.
"""

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, TYPE_CHECKING

from climdivs.contracts.base import require
from climdivs.contracts.failure import ConfigError
from climdivs.pipeline.processor import ClimateDivisionProcessor
from climdivs.regrid.grads import GradsRegridder
from climdivs.schemas.cli import parse_run_date

if TYPE_CHECKING:
    from climdivs.schemas import InternalConfig

__all__ = ['PipelineOrchestrator', 'setup_logging']

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str, log_path: Path | str | None = None) -> None:
    """Configure the root logger with a console and an optional file handler.

    Existing root handlers are replaced so repeated runs in one process do
    not duplicate output.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)


class PipelineOrchestrator:
    """Run one grid through regridding (optional) and the core processor.

    Parameters
    ----------
    config : InternalConfig
        Fully validated runtime configuration. ``run.output`` and one of
        ``run.grid`` or ``run.ctl`` (with ``run.date``) must be set.
    output_dirs : dict
        Directory layout from setup_output_directories(): ``base``, ``logs``,
        ``work``.
    """

    def __init__(self, config: "InternalConfig", output_dirs: Dict[str, Path]):
        self.config = config
        self.output_dirs = output_dirs
        self.processor = ClimateDivisionProcessor(config)

    def _log_path(self) -> Path:
        stamp = self.config.run.date or "nodate"
        return Path(self.output_dirs["logs"]) / f"grid_to_climdivs_{stamp}.log"

    @contextmanager
    def _work_dir(self) -> Iterator[Path]:
        """Scoped temporary directory under ``work/``, removed on every exit path."""
        work_root = Path(self.output_dirs["work"])
        work_root.mkdir(parents=True, exist_ok=True)
        if self.config.regridder.keep_work_files:
            path = Path(tempfile.mkdtemp(prefix="climdivs_", dir=work_root))
            logger.info("Keeping work files in %s", path)
            yield path
            return
        with tempfile.TemporaryDirectory(prefix="climdivs_", dir=work_root) as tmp:
            yield Path(tmp)

    def run(self, configure_logging: bool = True) -> Path:
        """Execute the run and return the report path.

        Raises
        ------
        ClimdivsError
            Any stage failure; no report is written in that case.
        """
        run = self.config.run
        if configure_logging:
            setup_logging(self.config.logging.level, self._log_path())

        require(run.output is not None, "No output file given (run.output)", ConfigError)
        require(
            (run.grid is None) != (run.ctl is None),
            "Exactly one of run.grid or run.ctl must be given",
            ConfigError,
        )

        logger.info("=" * 60)
        logger.info("grid-to-climdivs")
        logger.info("Division map: %s", self.config.paths.division_map)
        logger.info("Output:       %s", run.output)
        if self.config.conversion.spec:
            logger.info("Conversion:   %s", self.config.conversion.spec)
        logger.info("=" * 60)

        if run.grid is not None:
            return self.processor.run(run.grid, run.output)

        require(run.date is not None, "A run date is required to regrid run.ctl", ConfigError)
        regridder = GradsRegridder(self.config)
        with self._work_dir() as work_dir:
            grid_path = regridder.regrid(run.ctl, parse_run_date(run.date), work_dir)
            return self.processor.run(grid_path, run.output)
