from typing import Optional

import pyproj

from channelx.failures import UnitsError
from channelx.utils.crs import CRSLike
from channelx.utils.crs import DEFAULT_CRS


METERS_PER_FOOT = 0.3048
METERS_PER_US_SURVEY_FOOT = 1200 / 3937

# metres per model unit, keyed by lower case unit name
MODEL_UNITS = {
    "feet": METERS_PER_FOOT,
    "foot": METERS_PER_FOOT,
    "ft": METERS_PER_FOOT,
    "english": METERS_PER_FOOT,
    "us survey foot": METERS_PER_US_SURVEY_FOOT,
    "meters": 1.0,
    "meter": 1.0,
    "metre": 1.0,
    "metres": 1.0,
    "m": 1.0,
    "si": 1.0,
}


def crs_unit(target_crs: CRSLike = DEFAULT_CRS):
    """(name, metres per unit) of the first axis of a projected CRS"""
    axis = pyproj.CRS.from_user_input(target_crs).axis_info[0]
    return axis.unit_name, axis.unit_conversion_factor


def unit_factor(units: Optional[str], target_crs: CRSLike = DEFAULT_CRS) -> float:
    """
    Factor that converts model lengths to the linear unit of ``target_crs``.

    Areas scale by the square of this factor.

    Raises
    ------
    UnitsError
        If ``units`` is missing or not a known length unit
    """
    if units is None or not isinstance(units, str):
        raise UnitsError(f"unknown model units {units!r}")
    meters = MODEL_UNITS.get(units.strip().lower())
    if meters is None:
        raise UnitsError(f"unknown model units {units!r}, expected Feet or Meters")
    _, target_meters = crs_unit(target_crs)
    return meters / target_meters
