"""Regrid arbitrary gridded data onto the reference grid with GrADS.

The source data is described by a GrADS data descriptor (``.ctl``) file.
GrADS opens it, interpolates the first variable at the run date onto the
configured reference geometry with ``re()``, and writes the result as a
headerless little-endian float32 stream whose undefined value is the
missing sentinel. That stream is exactly what ``decode_grid`` reads.
"""

import logging
import subprocess
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from climdivs.contracts.base import require
from climdivs.contracts.failure import ConfigError, RegridError

if TYPE_CHECKING:
    from climdivs.schemas import InternalConfig

__all__ = ['GradsRegridder', 'grads_time']

logger = logging.getLogger(__name__)

SCRIPT_NAME = "regrid.gs"
OUTPUT_NAME = "regridded.bin"
QFILE_MAX_LINES = 20


def grads_time(day: date) -> str:
    """GrADS absolute time for 00Z on ``day``, e.g. ``00Z19SEP2018``."""
    return day.strftime("00Z%d%b%Y").upper()


class GradsRegridder:
    """Run GrADS in batch mode to produce the binary reference grid.

    Parameters
    ----------
    config : InternalConfig
        Runtime configuration. ``grid.geometry`` must be declared; it defines
        the target grid and therefore the expected output size.
    """

    def __init__(self, config: "InternalConfig"):
        require(
            config.grid.geometry is not None,
            "Regridding requires a declared grid geometry (grid.geometry)",
            ConfigError,
        )
        self.geometry = config.grid.geometry
        self.sentinel = config.grid.sentinel
        self.executable = config.regridder.grads_executable
        self.timeout = config.regridder.timeout_sec

    def build_script(self, ctl: Path | str, run_date: date, output_path: Path | str) -> str:
        """Return the GrADS script text for one regridding run."""
        g = self.geometry
        return "\n".join([
            "'reinit'",
            f"'open {ctl}'",
            "if (rc != 0)",
            "  say 'Could not open descriptor'",
            "  'quit'",
            "  return 1",
            "endif",
            # The line after "Number of Variables = N" names the first variable
            "'q file'",
            "var = ''",
            "i = 1",
            f"while (i <= {QFILE_MAX_LINES})",
            "  line = sublin(result, i)",
            "  if (subwrd(line, 1) = 'Number' & subwrd(line, 3) = 'Variables')",
            "    var = subwrd(sublin(result, i + 1), 1)",
            "    break",
            "  endif",
            "  i = i + 1",
            "endwhile",
            "if (var = '')",
            "  say 'No variables in descriptor'",
            "  'quit'",
            "  return 1",
            "endif",
            f"'set time {grads_time(run_date)}'",
            f"'set lon {g.lon_min} {g.lon_max}'",
            f"'set lat {g.lat_min} {g.lat_max}'",
            f"'set undef {self.sentinel}'",
            "'set gxout fwrite'",
            f"'set fwrite -le -st {output_path}'",
            (
                f"'d re('var', {g.nlon}, linear, {g.lon_min}, {g.resolution}, "
                f"{g.nlat}, linear, {g.lat_min}, {g.resolution}, ba)'"
            ),
            "'disable fwrite'",
            "'quit'",
            "",
        ])

    def regrid(self, ctl: Path | str, run_date: date, work_dir: Path | str) -> Path:
        """Regrid ``ctl`` at ``run_date`` into ``work_dir``.

        Returns
        -------
        Path
            The binary grid written by GrADS.

        Raises
        ------
        RegridError
            If the descriptor is missing, GrADS cannot be run or fails, or the
            output does not hold one float32 per reference gridpoint.
        """
        ctl = Path(ctl)
        work_dir = Path(work_dir)
        require(ctl.is_file(), f"GrADS descriptor not found: {ctl}", RegridError)

        output_path = work_dir / OUTPUT_NAME
        script_path = work_dir / SCRIPT_NAME
        script_path.write_text(self.build_script(ctl.resolve(), run_date, output_path))

        cmd = [self.executable, "-blc", f"run {script_path}"]
        logger.info("Regridding %s for %s with GrADS", ctl, run_date.isoformat())
        logger.debug("Command: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=work_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise RegridError(f"GrADS executable not found: {self.executable}") from e
        except subprocess.TimeoutExpired as e:
            raise RegridError(f"GrADS did not finish within {self.timeout} s") from e

        if result.stdout:
            logger.debug("GrADS output:\n%s", result.stdout)
        require(
            result.returncode == 0,
            f"GrADS exited with status {result.returncode}: {result.stderr.strip()}",
            RegridError,
        )
        require(output_path.is_file(), f"GrADS wrote no grid to {output_path}", RegridError)

        expected = self.geometry.size * 4
        actual = output_path.stat().st_size
        require(
            actual == expected,
            f"GrADS grid {output_path} has {actual} bytes, expected {expected}",
            RegridError,
        )
        logger.info("Regridded grid written to %s", output_path)
        return output_path
