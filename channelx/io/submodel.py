"""
Discovery and reading of hydraulic submodel files.

A submodel is a GeoPackage (or any multi-layer vector file) exposing a cross
section layer and an optional key/value metadata layer. Submodels are named
after the reach they model, e.g. ``<data_dir>/2821866/2821866.gpkg``.
"""

from pathlib import Path
from typing import List, Optional

import geopandas as gpd
import numpy as np
from loguru import logger

from channelx.failures import SubmodelError


REQUIRED_FIELDS = ["station_elevation_points", "bank_stations", "river_station"]
PASSTHROUGH_FIELDS = [
    "river_reach_rs",
    "source_river",
    "source_reach",
    "source_river_station",
]


def find_submodels(data_dir, pattern: str = "**/*.gpkg") -> List[Path]:
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"data directory not found: {data_dir}")
    return sorted(p for p in data_dir.glob(pattern) if p.is_file())


def submodel_name(path) -> str:
    return Path(path).stem


def list_layers(path) -> List[str]:
    return gpd.list_layers(path)["name"].tolist()


def read_cross_sections(path, layer: str = "XS") -> gpd.GeoDataFrame:
    """
    Read the cross section layer of a submodel.

    Passthrough identifier fields that are absent are added as missing
    values.

    Raises
    ------
    SubmodelError
        If the layer cannot be read or required fields are missing
    """
    try:
        xs = gpd.read_file(path, layer=layer)
    except Exception as e:
        raise SubmodelError(f"could not read layer {layer!r} from {path}: {e}") from e

    missing = [col for col in REQUIRED_FIELDS if col not in xs.columns]
    if missing:
        raise SubmodelError(f"layer {layer!r} is missing fields: {', '.join(missing)}")

    for col in PASSTHROUGH_FIELDS:
        if col not in xs.columns:
            xs[col] = np.nan
    return xs


def read_metadata(path, layer: str = "metadata", key: str = "units") -> Optional[str]:
    """
    Return the value stored under ``key`` in the metadata layer.

    Returns None, after logging a warning, when the layer or the key is
    missing or the layer cannot be read.
    """
    try:
        if layer not in list_layers(path):
            logger.warning(f"{submodel_name(path)}: no {layer!r} layer")
            return None
        metadata = gpd.read_file(path, layer=layer)
    except Exception as e:
        logger.warning(f"{submodel_name(path)}: could not read {layer!r} layer: {e}")
        return None

    if not {"key", "value"}.issubset(metadata.columns):
        logger.warning(f"{submodel_name(path)}: {layer!r} layer has no key/value columns")
        return None

    values = metadata.loc[metadata["key"] == key, "value"]
    if values.empty:
        logger.warning(f"{submodel_name(path)}: no {key!r} in {layer!r} layer")
        return None
    return values.iloc[0]
