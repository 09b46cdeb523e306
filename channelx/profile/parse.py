"""
Parsing of the serialized fields stored on cross section layers.

Submodels store the station-elevation profile as the text of a list of
pairs, e.g. ``"[(0.0, 612.3), (4.5, 610.9)]"`` or its JSON equivalent, and
the bank stations as a two value list, e.g. ``"[120.0, 185.5]"``.
"""

import ast

import numpy as np

from channelx.failures import TransectError


def _decode(value, name):
    if isinstance(value, (list, tuple, np.ndarray)):
        return value
    if value is None or not isinstance(value, str):
        raise TransectError(f"{name} is missing")
    try:
        return ast.literal_eval(value.strip())
    except (ValueError, SyntaxError, MemoryError, RecursionError) as e:
        raise TransectError(f"could not parse {name}: {e}") from e


def parse_station_elevation(value):
    """
    Parse a station-elevation profile.

    Parameters
    ----------
    value : str or sequence
        Serialized list of (station, elevation) pairs, or the decoded pairs

    Returns
    -------
    tuple of np.ndarray
        (stations, elevations)

    Raises
    ------
    TransectError
        If the profile cannot be parsed, is empty, contains non-finite
        values, or the stations are not in ascending order
    """
    pairs = _decode(value, "station_elevation_points")
    try:
        points = np.asarray(pairs, dtype=float)
    except (TypeError, ValueError) as e:
        raise TransectError(f"station_elevation_points are not numeric: {e}") from e

    if points.size == 0:
        raise TransectError("station_elevation_points is empty")
    if points.ndim != 2 or points.shape[1] != 2:
        raise TransectError(
            f"station_elevation_points must be (station, elevation) pairs, got shape {points.shape}"
        )
    if not np.isfinite(points).all():
        raise TransectError("station_elevation_points contains non-finite values")

    stations = points[:, 0]
    elevations = points[:, 1]
    if np.any(np.diff(stations) < 0):
        raise TransectError("stations are not in ascending order")
    return stations, elevations


def parse_bank_stations(value):
    """
    Parse the (left, right) bank stations.

    Raises
    ------
    TransectError
        If there are not exactly two finite values
    """
    banks = _decode(value, "bank_stations")
    try:
        banks = np.asarray(banks, dtype=float).ravel()
    except (TypeError, ValueError) as e:
        raise TransectError(f"bank_stations are not numeric: {e}") from e

    if banks.size != 2 or not np.isfinite(banks).all():
        raise TransectError(f"bank_stations must be two finite values, got {value!r}")
    return float(banks[0]), float(banks[1])
