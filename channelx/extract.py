"""
Per submodel, per cross section feature extraction.

For each cross section:

1. parse the station-elevation profile and the bank stations
2. convert lengths from the model units to the target CRS unit
3. smooth elevation outliers over the full profile
4. clip the profile to the banks
5. drop the cross section if no channel remains (too few points, too flat)
6. compute depth, top width, area and shape ratio

A problem with one cross section is logged, recorded as a Failure and the
cross section is skipped. A problem with the submodel itself gives an empty
result and a single Failure.
"""

from dataclasses import dataclass
from dataclasses import field
from typing import List

import geopandas as gpd
import numpy as np
import pandas as pd
from loguru import logger
from pyogrio.errors import DataLayerError
from pyogrio.errors import DataSourceError

from channelx.config import ChannelConfig
from channelx.failures import ChannelxError
from channelx.failures import Failure
from channelx.failures import TransectError
from channelx.failures import UnitsError
from channelx.geometry.channel import clean_profile
from channelx.geometry.channel import compute_channel_geometry
from channelx.io.submodel import PASSTHROUGH_FIELDS
from channelx.io.submodel import read_cross_sections
from channelx.io.submodel import read_metadata
from channelx.io.submodel import submodel_name
from channelx.profile.parse import parse_bank_stations
from channelx.profile.parse import parse_station_elevation
from channelx.reach.flowpaths import assign_flowpaths
from channelx.reach.flowpaths import load_flowpaths
from channelx.utils.crs import assert_projected
from channelx.utils.crs import to_target_crs
from channelx.utils.units import crs_unit
from channelx.utils.units import unit_factor


RECORD_COLUMNS = (
    ["flowpath_id", "river_station"]
    + PASSTHROUGH_FIELDS
    + ["model", "units", "Ym", "TW", "A", "r", "geometry"]
)

# errors of a reference network read or join that only affect one submodel
FLOWPATH_ERRORS = (ChannelxError, ValueError, OSError, DataSourceError, DataLayerError)


@dataclass
class SubmodelResult:
    model: str
    records: gpd.GeoDataFrame
    failures: List[Failure] = field(default_factory=list)


def empty_records(crs=None) -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(columns=RECORD_COLUMNS, geometry="geometry", crs=crs)


def transect_label(row) -> str:
    label = row.get("river_reach_rs")
    if pd.isna(label):
        label = f"river_station {row.get('river_station')}"
    return str(label)


def extract_transect(row, config: ChannelConfig, factor=1.0) -> dict:
    """
    Channel geometry of a single cross section.

    Parameters
    ----------
    row : mapping
        Cross section attributes, at least station_elevation_points,
        bank_stations and river_station
    config : ChannelConfig
    factor : float, default=1.0
        Multiplier from model length units to target CRS units, applied to
        stations, elevations and bank stations before any threshold is
        checked

    Returns
    -------
    dict
        Ym, TW, A and r

    Raises
    ------
    TransectError
        If the cross section is malformed or has no discernible channel
    """
    stations, elevations = parse_station_elevation(row["station_elevation_points"])
    left, right = parse_bank_stations(row["bank_stations"])
    if factor != 1.0:
        stations = stations * factor
        elevations = elevations * factor
        left, right = left * factor, right * factor

    stations, elevations = clean_profile(
        stations,
        elevations,
        left,
        right,
        outlier_threshold=config.profile.outlier_threshold,
        sequential=config.profile.sequential,
        min_points=config.profile.min_points,
        min_relief=config.profile.min_relief,
    )
    return compute_channel_geometry(stations, elevations).to_dict()


def extract_transects(xs, model, units, config: ChannelConfig, factor=1.0):
    """
    Extract all cross sections of one submodel.

    ``xs`` must already be in the target CRS and carry a flowpath_id column.
    Cross sections without a flowpath_id are recorded as failures.

    Returns
    -------
    tuple
        (records, failures)
    """
    assert_projected(xs.crs, config.target_crs)

    records = []
    failures = []
    for _, row in xs.iterrows():
        label = transect_label(row)
        if pd.isna(row["flowpath_id"]):
            logger.warning(f"{model}: skipping cross section {label}: no flowpath")
            failures.append(Failure(model, label, "flowpaths", "no flowpath matched the cross section"))
            continue

        try:
            geometry = extract_transect(row, config, factor)
        except TransectError as e:
            logger.warning(f"{model}: skipping cross section {label}: {e}")
            failures.append(Failure(model, label, e.stage, str(e)))
            continue

        record = {
            "flowpath_id": row["flowpath_id"],
            "river_station": row["river_station"],
            "model": model,
            "units": units,
            "geometry": row[xs.geometry.name],
        }
        for col in PASSTHROUGH_FIELDS:
            record[col] = row[col]
        record.update(geometry)
        records.append(record)

    if not records:
        return empty_records(xs.crs), failures
    frame = pd.DataFrame(records, columns=RECORD_COLUMNS)
    return gpd.GeoDataFrame(frame, geometry="geometry", crs=xs.crs), failures


def model_units(path, model, config: ChannelConfig):
    """
    Conversion factor and output units label of one submodel.

    Missing or unknown units leave the lengths as they are, with the units
    label set to None, and add a Failure.

    Returns
    -------
    tuple
        (factor, units, failures)
    """
    units = read_metadata(path, config.source.metadata_layer, config.source.units_key)
    if units is None:
        reason = f"no {config.source.units_key!r} in metadata, lengths are not converted"
        return 1.0, None, [Failure(model, None, "metadata", reason)]

    try:
        factor = unit_factor(units, config.target_crs)
    except UnitsError as e:
        logger.warning(f"{model}: {e}, lengths are not converted")
        return 1.0, None, [Failure(model, None, e.stage, str(e))]

    target_units, _ = crs_unit(config.target_crs)
    if not np.isclose(factor, 1.0):
        logger.debug(f"{model}: converting {units} to {target_units} (x{factor:g})")
    return factor, target_units, []


def extract_submodel(path, config: ChannelConfig) -> SubmodelResult:
    """
    Extract the channel geometry records of one submodel file.

    Never raises for a bad submodel: the problem is logged and returned as a
    Failure alongside an empty set of records.
    """
    model = submodel_name(path)
    logger.debug(f"Processing submodel {model}")

    try:
        xs = read_cross_sections(path, config.source.xs_layer)
        xs = to_target_crs(xs, config.target_crs)
    except ChannelxError as e:
        logger.warning(f"{model}: skipping submodel: {e}")
        return SubmodelResult(model, empty_records(config.target_crs), [Failure(model, None, e.stage, str(e))])

    factor, units, failures = model_units(path, model, config)

    if config.reference.flowpaths_file is None:
        xs["flowpath_id"] = model
    else:
        try:
            flowpaths = load_flowpaths(
                config.reference.flowpaths_file,
                xs,
                layer=config.reference.flowpaths_layer,
                id_column=config.reference.id_column,
                target_crs=config.target_crs,
            )
            xs = assign_flowpaths(xs, flowpaths, config.reference.id_column)
        except FLOWPATH_ERRORS as e:
            logger.warning(f"{model}: skipping submodel, flowpath lookup failed: {e}")
            failures.append(Failure(model, None, "flowpaths", str(e)))
            return SubmodelResult(model, empty_records(config.target_crs), failures)

    records, transect_failures = extract_transects(xs, model, units, config, factor)
    failures.extend(transect_failures)

    logger.debug(f"{model}: {len(records)} of {len(xs)} cross sections kept")
    return SubmodelResult(model, records, failures)
