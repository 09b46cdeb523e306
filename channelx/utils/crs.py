from typing import Union

import geopandas as gpd
import pyproj

from channelx.failures import CRSError


CRSLike = Union[str, int, pyproj.CRS]

# NAD83 / Conus Albers
DEFAULT_CRS = "EPSG:5070"


def assert_projected(crs: CRSLike, target_crs: CRSLike = DEFAULT_CRS) -> None:
    """
    Raise CRSError unless ``crs`` is the projected target CRS.

    Distances and areas are only computed in the target CRS, never in a
    geographic (lat/lon) system.
    """
    if crs is None:
        raise CRSError("geometry has no CRS")
    crs = pyproj.CRS.from_user_input(crs)
    target = pyproj.CRS.from_user_input(target_crs)
    if crs.is_geographic:
        raise CRSError(f"geometry is in geographic CRS {crs.name}")
    if not target.is_projected:
        raise CRSError(f"target CRS {target.name} is not projected")
    if not crs.equals(target):
        raise CRSError(f"geometry is in {crs.name}, expected {target.name}")


def to_target_crs(gdf: gpd.GeoDataFrame, target_crs: CRSLike = DEFAULT_CRS) -> gpd.GeoDataFrame:
    """Reproject to the target CRS, refusing data without a CRS"""
    if gdf.crs is None:
        raise CRSError("geometry has no CRS, cannot reproject")
    gdf = gdf.to_crs(target_crs)
    assert_projected(gdf.crs, target_crs)
    return gdf
