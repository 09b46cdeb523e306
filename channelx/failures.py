"""
Exceptions and the per-item failure log.

Every failure in a batch is scoped to a single transect or a single
submodel. Transect errors are caught by the submodel loop, submodel errors
by the batch orchestrator, and both end up as a ``Failure`` row.
"""

from dataclasses import dataclass
from dataclasses import asdict
from pathlib import Path
from typing import List

import pandas as pd
from loguru import logger


class ChannelxError(Exception):
    """Base class for recoverable extraction errors"""

    stage = "read"


class SubmodelError(ChannelxError):
    """A whole submodel cannot be processed"""


class CRSError(ChannelxError, ValueError):
    """Geometry is not in the expected projected coordinate system"""

    stage = "crs"


class UnitsError(ChannelxError, ValueError):
    """Model length units are missing or cannot be converted"""

    stage = "units"


class TransectError(ChannelxError):
    """A single cross section cannot be processed"""

    stage = "parse"


class BankStationError(TransectError):
    """Bank stations do not delimit a section of the profile"""

    stage = "banks"


class DegenerateProfileError(TransectError):
    """The clipped profile does not contain a discernible channel"""

    stage = "degenerate"


FAILURE_COLUMNS = ["model", "item", "stage", "reason"]


@dataclass
class Failure:
    """
    One skipped item

    Parameters
    ----------
    model : str
        Submodel the item belongs to
    item : str
        Transect identifier, or None for a submodel-level failure
    stage : str
        Step that failed (read, metadata, units, crs, flowpaths, parse,
        banks, degenerate, worker)
    reason : str
        Error message
    """

    model: str
    item: str
    stage: str
    reason: str


def failures_to_frame(failures: List[Failure]) -> pd.DataFrame:
    return pd.DataFrame([asdict(f) for f in failures], columns=FAILURE_COLUMNS)


def write_failure_log(failures: List[Failure], path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    failures_to_frame(failures).to_csv(path, index=False)
    logger.info(f"Wrote {len(failures)} failures to {path}")
    return path
