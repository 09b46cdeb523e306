import numpy as np

from channelx.failures import BankStationError


def validate_banks(stations, left, right):
    """
    Check that the bank stations delimit a section of the profile.

    Raises
    ------
    BankStationError
        If the banks are unordered or fall outside the station range
    """
    stations = np.asarray(stations, dtype=float)
    if not left < right:
        raise BankStationError(f"bank stations are not ordered: left={left}, right={right}")

    smin, smax = stations.min(), stations.max()
    if left < smin or right > smax:
        raise BankStationError(
            f"bank stations ({left}, {right}) outside of station range ({smin}, {smax})"
        )


def clip_to_banks(stations, elevations, left, right):
    """
    Keep the profile points with left <= station <= right.

    Only existing sample points are kept, nothing is interpolated at the
    banks. Order is preserved.

    Returns
    -------
    tuple of np.ndarray
        (stations, elevations) inside the banks
    """
    stations = np.asarray(stations, dtype=float)
    elevations = np.asarray(elevations, dtype=float)
    inside = (stations >= left) & (stations <= right)
    return stations[inside], elevations[inside]
