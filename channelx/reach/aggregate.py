import math

import geopandas as gpd
import numpy as np
import pandas as pd
from loguru import logger

from channelx.failures import Failure


REACH_COLUMNS = [
    "flowpath_id",
    "TW",
    "Y",
    "r",
    "source_river_station",
    "river_station",
    "model",
    "units",
    "geometry",
]

# taken from the representative (median ranked) cross section
REPRESENTATIVE_FIELDS = ["geometry", "source_river_station", "river_station", "model", "units"]


def finite_mean(values):
    """Mean of the finite values, nan if there are none"""
    values = np.asarray(values, dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return np.nan
    return float(values.mean())


def median_rank_index(n):
    """
    Zero based position of the representative cross section in a group of n.

    This is the 1-indexed position ceil(n / 2): for an even count the first
    of the two middle elements is picked (the 2nd of 4, never the 3rd).
    """
    if n < 1:
        raise ValueError("empty group has no representative")
    return math.ceil(n / 2) - 1


def _units_key(units):
    return "" if pd.isna(units) else str(units)


def _record_label(row):
    label = row.get("river_reach_rs")
    if pd.isna(label):
        label = f"river_station {row.get('river_station')}"
    return str(label)


def drop_mixed_units(records: gpd.GeoDataFrame):
    """
    Keep a single length unit per flowpath.

    Where the records of one flowpath carry differing units, only the rows
    in the most common known unit are kept (ties go to the first unit in
    sorted order). Rows without units lose to any known unit.

    Returns
    -------
    tuple
        (records, failures), one Failure per dropped cross section
    """
    if records.empty:
        return records, []

    keys = records["units"].map(_units_key)
    keep = pd.Series(True, index=records.index)
    failures = []
    for flowpath_id, group_keys in keys.groupby(records["flowpath_id"], sort=True):
        if group_keys.nunique() < 2:
            continue
        counts = group_keys[group_keys != ""].value_counts()
        counts = counts.sort_index(kind="stable").sort_values(ascending=False, kind="stable")
        chosen = counts.index[0]
        dropped = group_keys.index[group_keys != chosen]
        keep[dropped] = False
        for _, row in records.loc[dropped].iterrows():
            reason = f"flowpath {flowpath_id} mixes {row['units']!r} with {chosen!r} units"
            failures.append(Failure(row["model"], _record_label(row), "units", reason))
        logger.warning(f"Flowpath {flowpath_id}: dropped {len(dropped)} cross sections not in {chosen}")
    return records[keep], failures


def aggregate_reaches(records: gpd.GeoDataFrame, crs=None) -> gpd.GeoDataFrame:
    """
    Reduce per cross section records to one record per flowpath.

    TW, Ym and r are averaged over finite values. Geometry and the source
    references come from a single cross section picked by median rank of
    river station, not from a centroid of the group.

    Parameters
    ----------
    records : gpd.GeoDataFrame
        Per cross section records with columns flowpath_id, river_station,
        TW, Ym, r and the representative fields
    crs : optional
        CRS of the output when ``records`` has none

    Returns
    -------
    gpd.GeoDataFrame
        One row per flowpath_id, sorted by flowpath_id

    Raises
    ------
    ValueError
        If the records of one flowpath carry differing units, see
        drop_mixed_units
    """
    crs = records.crs if records.crs is not None else crs
    if records.empty:
        return gpd.GeoDataFrame(columns=REACH_COLUMNS, geometry="geometry", crs=crs)

    rows = []
    for flowpath_id, group in records.groupby("flowpath_id", sort=True):
        units = group["units"].map(_units_key).unique()
        if len(units) > 1:
            raise ValueError(f"flowpath {flowpath_id} mixes units {sorted(units)}")
        group = group.sort_values("river_station", kind="stable")
        representative = group.iloc[median_rank_index(len(group))]

        row = {
            "flowpath_id": flowpath_id,
            "TW": finite_mean(group["TW"]),
            "Y": finite_mean(group["Ym"]),
            "r": finite_mean(group["r"]),
        }
        for col in REPRESENTATIVE_FIELDS:
            row[col] = representative[col]
        rows.append(row)

    reaches = gpd.GeoDataFrame(pd.DataFrame(rows, columns=REACH_COLUMNS), geometry="geometry", crs=crs)
    logger.debug(f"Aggregated {len(records)} cross sections into {len(reaches)} reaches")
    return reaches
