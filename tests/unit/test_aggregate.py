import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import Point

from channelx.reach.aggregate import REACH_COLUMNS
from channelx.reach.aggregate import aggregate_reaches
from channelx.reach.aggregate import drop_mixed_units
from channelx.reach.aggregate import finite_mean
from channelx.reach.aggregate import median_rank_index
from channelx.reach.classify import join_stream_classification
from channelx.reach.classify import key_text


def make_records(rows):
    frame = pd.DataFrame(rows)
    frame["source_river_station"] = frame["river_station"]
    frame["model"] = "model_" + frame["flowpath_id"].astype(str)
    frame["units"] = "Feet"
    frame["geometry"] = [Point(rs, 0) for rs in frame["river_station"]]
    return gpd.GeoDataFrame(frame, geometry="geometry", crs="EPSG:5070")


def test_finite_mean_skips_non_finite():
    assert finite_mean([1.0, np.nan, 3.0]) == pytest.approx(2.0)
    assert finite_mean([1.0, np.inf, 3.0]) == pytest.approx(2.0)
    assert np.isnan(finite_mean([np.nan]))
    assert np.isnan(finite_mean([]))


@pytest.mark.parametrize("n, expected", [(1, 0), (2, 0), (3, 1), (4, 1), (5, 2)])
def test_median_rank_index(n, expected):
    assert median_rank_index(n) == expected


def test_median_rank_index_empty():
    with pytest.raises(ValueError):
        median_rank_index(0)


def test_mean_r_excludes_undefined_values():
    records = make_records(
        [
            {"flowpath_id": 7, "river_station": 1.0, "TW": 10.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 7, "river_station": 2.0, "TW": 20.0, "Ym": 2.0, "r": np.nan},
            {"flowpath_id": 7, "river_station": 3.0, "TW": 30.0, "Ym": 3.0, "r": 3.0},
        ]
    )
    reaches = aggregate_reaches(records)
    assert len(reaches) == 1
    reach = reaches.iloc[0]
    assert reach["r"] == pytest.approx(2.0)
    assert reach["TW"] == pytest.approx(20.0)
    assert reach["Y"] == pytest.approx(2.0)


def test_representative_is_second_of_four_by_river_station():
    records = make_records(
        [
            {"flowpath_id": 1, "river_station": 400.0, "TW": 1.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 1, "river_station": 100.0, "TW": 1.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 1, "river_station": 300.0, "TW": 1.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 1, "river_station": 200.0, "TW": 1.0, "Ym": 1.0, "r": 1.0},
        ]
    )
    reach = aggregate_reaches(records).iloc[0]
    assert reach["river_station"] == 200.0
    assert reach["source_river_station"] == 200.0
    assert reach.geometry.equals(Point(200.0, 0))


def test_one_row_per_flowpath():
    records = make_records(
        [
            {"flowpath_id": 2, "river_station": 1.0, "TW": 5.0, "Ym": 1.0, "r": 0.5},
            {"flowpath_id": 1, "river_station": 1.0, "TW": 8.0, "Ym": 2.0, "r": 0.7},
            {"flowpath_id": 2, "river_station": 2.0, "TW": 7.0, "Ym": 3.0, "r": 0.9},
        ]
    )
    reaches = aggregate_reaches(records)
    assert reaches["flowpath_id"].tolist() == [1, 2]
    assert reaches["TW"].tolist() == pytest.approx([8.0, 6.0])
    assert reaches.crs == records.crs
    assert list(reaches.columns) == REACH_COLUMNS


def test_empty_records():
    records = gpd.GeoDataFrame(columns=["flowpath_id", "geometry"], geometry="geometry")
    reaches = aggregate_reaches(records, crs="EPSG:5070")
    assert reaches.empty
    assert list(reaches.columns) == REACH_COLUMNS


def test_join_stream_classification():
    records = make_records(
        [
            {"flowpath_id": "wb-1", "river_station": 1.0, "TW": 5.0, "Ym": 1.0, "r": 0.5},
            {"flowpath_id": "wb-2", "river_station": 1.0, "TW": 5.0, "Ym": 1.0, "r": 0.5},
        ]
    )
    reaches = aggregate_reaches(records)
    table = pd.DataFrame(
        {"id": ["wb-1", "wb-3"], "stream_order": [3, 1], "stream_type": ["perennial", "intermittent"]}
    )
    joined = join_stream_classification(reaches, table, key="id")

    assert len(joined) == 2
    assert "id" not in joined.columns
    assert joined.loc[joined["flowpath_id"] == "wb-1", "stream_order"].iloc[0] == 3
    assert pd.isna(joined.loc[joined["flowpath_id"] == "wb-2", "stream_type"].iloc[0])


def test_join_stream_classification_from_csv(tmp_path):
    records = make_records(
        [{"flowpath_id": 11, "river_station": 1.0, "TW": 5.0, "Ym": 1.0, "r": 0.5}]
    )
    path = tmp_path / "order.csv"
    pd.DataFrame({"id": [11], "stream_order": [4]}).to_csv(path, index=False)

    joined = join_stream_classification(aggregate_reaches(records), path)
    assert joined["stream_order"].tolist() == [4]


def test_join_stream_classification_missing_key():
    records = make_records(
        [{"flowpath_id": 11, "river_station": 1.0, "TW": 5.0, "Ym": 1.0, "r": 0.5}]
    )
    with pytest.raises(ValueError):
        join_stream_classification(aggregate_reaches(records), pd.DataFrame({"x": [1]}))


def test_mixed_units_are_not_averaged():
    records = make_records(
        [
            {"flowpath_id": 1, "river_station": 1.0, "TW": 6.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 1, "river_station": 2.0, "TW": 20.0, "Ym": 1.0, "r": 1.0},
        ]
    )
    records["units"] = ["metre", "Feet"]
    with pytest.raises(ValueError, match="mixes units"):
        aggregate_reaches(records)


def test_drop_mixed_units_keeps_known_units():
    records = make_records(
        [
            {"flowpath_id": 1, "river_station": 1.0, "TW": 6.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 1, "river_station": 2.0, "TW": 20.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 1, "river_station": 3.0, "TW": 8.0, "Ym": 1.0, "r": 1.0},
            {"flowpath_id": 2, "river_station": 1.0, "TW": 9.0, "Ym": 1.0, "r": 1.0},
        ]
    )
    records["units"] = ["metre", None, "metre", None]

    kept, failures = drop_mixed_units(records)

    assert kept["river_station"].tolist() == [1.0, 3.0, 1.0]
    assert len(failures) == 1
    assert failures[0].stage == "units"
    assert failures[0].item == "river_station 2.0"

    reaches = aggregate_reaches(kept)
    assert reaches["TW"].tolist() == pytest.approx([7.0, 9.0])


def test_join_stream_classification_csv_key_with_blank(tmp_path):
    records = make_records(
        [
            {"flowpath_id": 11, "river_station": 1.0, "TW": 5.0, "Ym": 1.0, "r": 0.5},
            {"flowpath_id": 12, "river_station": 1.0, "TW": 5.0, "Ym": 1.0, "r": 0.5},
        ]
    )
    path = tmp_path / "order.csv"
    path.write_text("id,stream_order\n11,4\n,2\n")

    joined = join_stream_classification(aggregate_reaches(records), path)

    assert joined["flowpath_id"].tolist() == ["11", "12"]
    assert joined["stream_order"].iloc[0] == 4
    assert pd.isna(joined["stream_order"].iloc[1])


def test_key_text():
    assert key_text(11.0) == "11"
    assert key_text("11") == "11"
    assert key_text(11.5) == "11.5"
    assert key_text("wb-1") == "wb-1"
    assert key_text(np.nan) is None
