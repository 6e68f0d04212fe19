import json

import pytest

from freight.pricing.rate_table import RateTable, RateTableError, get_rate_table
from freight.pricing.vehicle import VehicleClass


class TestRateTableLoad:

    def test_bundled_table_loads(self):
        table = get_rate_table()
        assert len(table.ranges) == 75

    def test_missing_file(self, tmp_path):
        with pytest.raises(RateTableError):
            RateTable.load(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RateTableError):
            RateTable.load(path)

    def test_empty_ranges(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"ranges": {}}), encoding="utf-8")
        with pytest.raises(RateTableError):
            RateTable.load(path)

    def test_loads_custom_table(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(json.dumps({"ranges": {"KM_1_2": {"TON_1": 42000}}}), encoding="utf-8")
        table = RateTable.load(path)
        assert table.lookup(2, VehicleClass.TON_1) == 42000


class TestRateTableLookup:

    @pytest.mark.parametrize(
        "distance,vehicle,expected",
        [
            (1, VehicleClass.TON_1, 42000),
            (2, VehicleClass.DAMAS, 31000),
            (10, VehicleClass.TON_1, 49000),
            (12, VehicleClass.TON_1, 51000),
            (12, VehicleClass.TON_1_4, 57000),
            (12, VehicleClass.TON_5, 112000),
            (50, VehicleClass.TON_1, 85000),
            (53, VehicleClass.TON_1, 90000),
            (105, VehicleClass.TON_1, 139000),
            (500, VehicleClass.TON_1, 490000),
        ]
    )
    def test_known_rates(self, distance, vehicle, expected):
        assert get_rate_table().lookup(distance, vehicle) == expected

    def test_out_of_range_distance(self):
        assert get_rate_table().lookup(501, VehicleClass.TON_1) is None

    def test_missing_vehicle_in_band(self):
        table = RateTable({"KM_1_2": {"TON_1": 42000}})
        assert table.lookup(1, VehicleClass.TON_5) is None

    def test_table_is_read_only(self):
        table = get_rate_table()
        with pytest.raises(TypeError):
            table.ranges["KM_1_2"] = {}
        with pytest.raises(TypeError):
            table.ranges["KM_1_2"]["TON_1"] = 1

    def test_larger_vehicle_never_cheaper_for_same_distance(self):
        table = get_rate_table()
        for rates in table.ranges.values():
            values = [rates[v.value] for v in VehicleClass if v not in (VehicleClass.DAMAS, VehicleClass.LABO)]
            assert values == sorted(values)
