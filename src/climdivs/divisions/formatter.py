"""Render division averages as the ASCII climate division report.

One line per division id 1..344, ascending, ``"<id> <value>"``, with every
value printed at the same fixed number of decimals.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from climdivs.contracts.base import require
from climdivs.constants import DIVISION_IDS, MISSING_SENTINEL, N_DIVISIONS

__all__ = ['DEFAULT_PRECISION', 'format_records', 'write_records']

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 2


def _format_value(value: float, precision: int) -> str:
    text = f"{value:.{precision}f}"
    # -0.001 rounds to "-0.00"; print zero without a sign
    if text.startswith("-") and float(text) == 0.0:
        return text[1:]
    return text


def format_records(
    averages: Union[pd.Series, dict[int, float]],
    sentinel: float = MISSING_SENTINEL,
    precision: int = DEFAULT_PRECISION,
) -> list[str]:
    """Format one ``"<id> <value>"`` line per division id 1..344.

    Ids missing from ``averages`` are written with the sentinel.
    """
    require(precision >= 0, f"Output precision must be >= 0, got {precision}")
    series = pd.Series(averages, dtype=np.float64).reindex(DIVISION_IDS, fill_value=float(sentinel))

    lines = [f"{int(division)} {_format_value(value, precision)}" for division, value in series.items()]

    require(
        len(lines) == N_DIVISIONS,
        f"Report contract violated: {len(lines)} lines, expected {N_DIVISIONS}",
    )
    return lines


def write_records(lines: list[str], path: Path | str) -> Path:
    """Write report lines to ``path`` atomically.

    The lines go to a temporary file next to ``path`` which then replaces it,
    so readers never see a partially written report.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="ascii", newline="\n") as fh:
            fh.write("".join(f"{line}\n" for line in lines))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote %d division records to %s", len(lines), path)
    return path
