from pathlib import Path

import geopandas as gpd
import pytest
from shapely.geometry import LineString
from shapely.geometry import Point


# a V shaped channel, banks at 10 and 30
V_CHANNEL = "[(0, 15.0), (10, 10.0), (20, 5.0), (30, 10.0), (40, 15.0)]"
V_BANKS = "[10, 30]"

FLAT_CHANNEL = "[(0, 50.0), (10, 50.0), (20, 50.0), (30, 50.0)]"


def xs_line(x, y=0.0, half_width=20.0):
    return LineString([(x, y - half_width), (x, y + half_width)])


def write_submodel(
    directory: Path,
    name: str,
    transects: list,
    crs="EPSG:5070",
    units="Meters",
):
    """
    Write a submodel GeoPackage with an XS layer and, when units is not
    None, a key/value metadata layer.

    transects: dicts with station_elevation_points, bank_stations,
    river_station and optionally geometry and passthrough fields
    """
    directory = Path(directory) / name
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.gpkg"

    rows = []
    for i, transect in enumerate(transects):
        row = {
            "river_reach_rs": f"river reach {transect['river_station']}",
            "source_river": "river",
            "source_reach": "reach",
            "source_river_station": transect["river_station"],
            "geometry": xs_line(100.0 * i),
        }
        row.update(transect)
        rows.append(row)

    xs = gpd.GeoDataFrame(rows, geometry="geometry", crs=crs)
    xs.to_file(path, layer="XS", driver="GPKG")

    if units is not None:
        metadata = gpd.GeoDataFrame(
            {"key": ["units", "ras_version"], "value": [units, "6.1"]},
            geometry=[Point(0, 0), Point(0, 0)],
            crs=crs,
        )
        metadata.to_file(path, layer="metadata", driver="GPKG")
    return path


def write_reference(path, ids=("wb-1", "wb-2"), crs="EPSG:5070"):
    """
    Write a reference flowpath network: wb-1 crosses the first cross
    sections of a submodel, wb-2 is far away.
    """
    lines = [LineString([(-10, 0), (250, 0)]), LineString([(5000, 0), (6000, 0)])]
    gpd.GeoDataFrame({"id": list(ids)}, geometry=lines[: len(ids)], crs=crs).to_file(
        path, layer="flowpaths", driver="GPKG"
    )
    return path


@pytest.fixture
def v_transect():
    def _make(river_station, **kwargs):
        transect = {
            "station_elevation_points": V_CHANNEL,
            "bank_stations": V_BANKS,
            "river_station": float(river_station),
        }
        transect.update(kwargs)
        return transect

    return _make


@pytest.fixture
def data_dir(tmp_path):
    directory = tmp_path / "submodels"
    directory.mkdir()
    return directory


@pytest.fixture
def submodel_writer():
    return write_submodel


@pytest.fixture
def reference_file(tmp_path):
    return write_reference(tmp_path / "reference.gpkg")


@pytest.fixture
def flat_transect():
    def _make(river_station):
        return {
            "station_elevation_points": FLAT_CHANNEL,
            "bank_stations": "[0, 30]",
            "river_station": float(river_station),
        }

    return _make
