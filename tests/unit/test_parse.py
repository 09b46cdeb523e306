import numpy as np
import pytest

from channelx.failures import BankStationError
from channelx.failures import TransectError
from channelx.profile.clip import clip_to_banks
from channelx.profile.clip import validate_banks
from channelx.profile.parse import parse_bank_stations
from channelx.profile.parse import parse_station_elevation


class TestStationElevation:
    def test_tuple_text(self):
        stations, elevations = parse_station_elevation("[(0, 10.0), (1.5, 9.2), (3, 10.4)]")
        np.testing.assert_array_equal(stations, [0.0, 1.5, 3.0])
        np.testing.assert_array_equal(elevations, [10.0, 9.2, 10.4])

    def test_json_text(self):
        stations, elevations = parse_station_elevation("[[0, 10.0], [2, 8.0]]")
        np.testing.assert_array_equal(stations, [0.0, 2.0])
        np.testing.assert_array_equal(elevations, [10.0, 8.0])

    def test_decoded_pairs(self):
        stations, _ = parse_station_elevation([(0, 1.0), (1, 2.0)])
        np.testing.assert_array_equal(stations, [0.0, 1.0])

    def test_repeated_station_allowed(self):
        stations, _ = parse_station_elevation("[(0, 1.0), (1, 2.0), (1, 0.5)]")
        assert len(stations) == 3

    @pytest.mark.parametrize(
        "text",
        [
            "not a list",
            "[(0, 1.0), (1, ",
            "[]",
            "[(0, 1.0, 2.0)]",
            "[(0, 1.0), (1,)]",
            "[('a', 'b')]",
            "[(0, nan)]",
            None,
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(TransectError):
            parse_station_elevation(text)

    def test_descending_stations_rejected(self):
        with pytest.raises(TransectError, match="ascending"):
            parse_station_elevation("[(0, 1.0), (5, 2.0), (3, 1.0)]")


class TestBankStations:
    def test_list_text(self):
        assert parse_bank_stations("[12.5, 40]") == (12.5, 40.0)

    def test_tuple_text(self):
        assert parse_bank_stations("(1, 2)") == (1.0, 2.0)

    @pytest.mark.parametrize("text", ["[1]", "[1, 2, 3]", "", "[1, 'x']"])
    def test_malformed(self, text):
        with pytest.raises(TransectError):
            parse_bank_stations(text)


class TestClip:
    def test_keeps_points_inside_closed_interval(self):
        stations = [0, 1, 2, 3, 4]
        elevations = [5, 4, 3, 4, 5]
        s, e = clip_to_banks(stations, elevations, 1, 3)
        np.testing.assert_array_equal(s, [1, 2, 3])
        np.testing.assert_array_equal(e, [4, 3, 4])

    def test_no_interpolation_at_banks(self):
        s, e = clip_to_banks([0, 1, 2, 3], [5, 4, 4, 5], 0.5, 2.5)
        np.testing.assert_array_equal(s, [1, 2])
        np.testing.assert_array_equal(e, [4, 4])

    def test_unordered_banks_rejected(self):
        with pytest.raises(BankStationError):
            validate_banks([0, 1, 2], 2, 1)

    def test_banks_outside_domain_rejected(self):
        with pytest.raises(BankStationError):
            validate_banks([0, 1, 2], 0, 5)

    def test_banks_on_domain_edges_accepted(self):
        validate_banks([0, 1, 2], 0, 2)
