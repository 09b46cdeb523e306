import geopandas as gpd
from loguru import logger

from channelx.utils.crs import to_target_crs


def load_flowpaths(path, mask, layer=None, id_column="id", target_crs="EPSG:5070"):
    """
    Read the reference flowpaths that intersect the bounding box of ``mask``.

    Parameters
    ----------
    path : str or Path
        Reference hydrologic network dataset
    mask : gpd.GeoDataFrame
        Features whose bounding box limits the read, reprojected to the
        dataset CRS by geopandas
    layer : str, optional
    id_column : str, default="id"
    target_crs : str, default="EPSG:5070"

    Returns
    -------
    gpd.GeoDataFrame
        Columns [id_column, "geometry"] in the target CRS
    """
    flowpaths = gpd.read_file(path, layer=layer, bbox=mask)
    if id_column not in flowpaths.columns:
        raise ValueError(f"flowpath dataset has no {id_column!r} column")
    flowpaths = flowpaths[[id_column, "geometry"]]
    logger.debug(f"{len(flowpaths)} reference flowpaths inside bounding box")
    return to_target_crs(flowpaths, target_crs)


def assign_flowpaths(xs, flowpaths, id_column="id"):
    """
    Label each cross section with the id of its nearest flowpath.

    Both inputs must share a CRS. Ties are broken by keeping the first
    match. Returns a copy of ``xs`` with a ``flowpath_id`` column, which
    replaces any existing one. Cross sections with no match (empty
    geometry) get a missing flowpath_id.
    """
    if flowpaths.empty:
        raise ValueError("no reference flowpaths near the cross sections")

    # join on geometry only so cross section attributes never collide with
    # the flowpath id or the join index column
    left = xs[[xs.geometry.name]]
    right = flowpaths[[id_column, flowpaths.geometry.name]].rename(columns={id_column: "flowpath_id"})
    joined = gpd.sjoin_nearest(left, right, how="left")
    joined = joined[~joined.index.duplicated(keep="first")]

    xs = xs.copy()
    xs["flowpath_id"] = joined["flowpath_id"].reindex(xs.index)
    return xs
