"""
Bankfull channel geometry of a single cross section.

All functions expect a cleaned profile, i.e. the smoothed station-elevation
points that fall between the bank stations. Stations and elevations are in
the projected units of the source model.

Ym : depth, max(elevation) - min(elevation)
TW : top width, max(station) - min(station)
A  : cross sectional area below the bankfull line
r  : Dingman's shape coefficient, A / (Ym * TW - A)
"""

from dataclasses import dataclass
from dataclasses import asdict

import numpy as np
from scipy.integrate import trapezoid

from channelx.failures import DegenerateProfileError
from channelx.profile.clip import clip_to_banks
from channelx.profile.clip import validate_banks
from channelx.profile.smooth import smooth_elevations


@dataclass(frozen=True)
class ChannelGeometry:
    Ym: float
    TW: float
    A: float
    r: float

    def to_dict(self):
        return asdict(self)


def is_valid_profile(elevations, min_points=3, min_relief=0.25):
    """
    True if the profile has at least ``min_points`` points and at least
    ``min_relief`` of elevation range.
    """
    elevations = np.asarray(elevations, dtype=float)
    if len(elevations) < min_points:
        return False
    return bool(elevations.max() - elevations.min() >= min_relief)


def channel_depth(elevations):
    elevations = np.asarray(elevations, dtype=float)
    return float(elevations.max() - elevations.min())


def top_width(stations):
    stations = np.asarray(stations, dtype=float)
    return float(stations.max() - stations.min())


def channel_area(stations, elevations, depth=None):
    """
    Area between a horizontal line at ``depth`` and the bed profile.

    Computed as the difference of the area under the horizontal line and the
    area under the bed, both integrated with the trapezoidal rule over the
    points at or below ``depth``. Both integrals share the direction sign of
    the stations, so descending stations give the same area as ascending
    ones.

    Parameters
    ----------
    stations : array-like
    elevations : array-like
    depth : float, optional
        Water surface elevation, defaults to the highest point of the profile

    Returns
    -------
    float
        Area >= 0, 0 when the result is not finite
    """
    stations = np.asarray(stations, dtype=float)
    elevations = np.asarray(elevations, dtype=float)
    if depth is None:
        depth = elevations.max()

    below = elevations <= depth
    x = stations[below]
    y = elevations[below]
    if len(x) < 2:
        return 0.0

    direction = -1 if np.all(np.diff(x) <= 0) else 1
    water = direction * trapezoid(np.full_like(y, depth), x)
    bed = direction * trapezoid(y, x)

    area = water - bed
    if not np.isfinite(area):
        return 0.0
    return float(max(area, 0.0))


def shape_ratio(area, depth, width):
    """Dingman's r, nan where depth * width == area"""
    denominator = depth * width - area
    if denominator == 0:
        return np.nan
    return float(area / denominator)


def compute_channel_geometry(stations, elevations):
    depth = channel_depth(elevations)
    width = top_width(stations)
    area = channel_area(stations, elevations)
    return ChannelGeometry(Ym=depth, TW=width, A=area, r=shape_ratio(area, depth, width))


def clean_profile(
    stations,
    elevations,
    left,
    right,
    outlier_threshold=100,
    sequential=True,
    min_points=3,
    min_relief=0.25,
):
    """
    Smooth the full profile, clip it to the banks and check that a channel
    remains.

    Returns
    -------
    tuple of np.ndarray
        (stations, elevations) of the cleaned profile

    Raises
    ------
    TransectError
        If the banks do not fit the profile
    DegenerateProfileError
        If the clipped profile is too short or too flat
    """
    validate_banks(stations, left, right)
    elevations = smooth_elevations(elevations, outlier_threshold, sequential)
    stations, elevations = clip_to_banks(stations, elevations, left, right)

    if not is_valid_profile(elevations, min_points, min_relief):
        relief = channel_depth(elevations) if len(elevations) else 0.0
        raise DegenerateProfileError(
            f"no channel between banks: {len(elevations)} points, relief {relief:.3f}"
        )
    return stations, elevations
