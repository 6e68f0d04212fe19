from decimal import Decimal
from types import SimpleNamespace

import pytest

from freight.pricing.surcharges import STATIC_RULES, SurchargeKind, SurchargeRule, body_type_code
from freight.pricing.vehicle import VehicleClass
from freight.services.surcharge_service import surcharge_codes


class TestSurchargeRuleConstruction:

    def test_additive_bounds(self):
        rule = SurchargeRule.additive("COLD", 100, 200)
        assert rule.kind == SurchargeKind.ADD
        assert rule.min_add == Decimal(100)
        assert rule.max_add == Decimal(200)
        assert rule.is_additive

    def test_additive_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            SurchargeRule.additive("BAD", 200, 100)

    def test_multiplier_rejects_missing_bound(self):
        with pytest.raises(ValueError):
            SurchargeRule.multiplier("BAD", "1.5", None)

    def test_fixed_uses_one_amount_for_both_bounds(self):
        rule = SurchargeRule.fixed("TOP", 30000)
        assert rule.min_add == rule.max_add == Decimal(30000)
        assert rule.resolve_fixed_add(VehicleClass.TON_25) == Decimal(30000)

    def test_fixed_by_vehicle_lookup(self):
        rule = STATIC_RULES["LIFT_HORO"]
        assert rule.resolve_fixed_add(VehicleClass.TON_1) == Decimal(15000)
        assert rule.resolve_fixed_add(VehicleClass.TON_1_4) == Decimal(25000)
        assert rule.resolve_fixed_add(VehicleClass.TON_5) is None

    def test_heavy_classes_share_lift_price(self):
        rule = STATIC_RULES["LIFT"]
        for name in ("TON_11", "TON_14", "TON_15", "TON_18", "TON_25"):
            assert rule.resolve_fixed_add(VehicleClass[name]) == Decimal(130000)


class TestFromRecord:

    def test_add_record(self):
        option = SimpleNamespace(code="HANGER", option_type="ADD", min_add_won=50000, max_add_won=90000)
        rule = SurchargeRule.from_record(option)
        assert rule == SurchargeRule.additive("HANGER", 50000, 90000)

    def test_fixed_record_falls_back_to_min_amount(self):
        option = SimpleNamespace(code="TOP", option_type="FIXED", fixed_add_won=None, min_add_won=25000)
        assert SurchargeRule.from_record(option).min_add == Decimal(25000)

    def test_fixed_by_vehicle_record(self):
        option = SimpleNamespace(code="LIFT", option_type="FIXED_BY_VEHICLE")
        rates = [
            SimpleNamespace(vehicle_type="TON_1", add_won=11000),
            SimpleNamespace(vehicle_type="TON_5", add_won=81000),
        ]
        rule = SurchargeRule.from_record(option, rates)
        assert rule.resolve_fixed_add(VehicleClass.TON_5) == Decimal(81000)
        assert rule.resolve_fixed_add(VehicleClass.TON_8) is None

    def test_unknown_kind(self):
        option = SimpleNamespace(code="X", option_type="PERCENT")
        with pytest.raises(ValueError):
            SurchargeRule.from_record(option)


class TestBodyTypeCodes:

    @pytest.mark.parametrize(
        "body_type,expected",
        [
            ("LIFT", "LIFT"),
            ("lift_wingbody", "LIFT_WINGBODY"),
            (" TOP ", "WINGBODY_TOP"),
            ("WINGBODY", None),
            ("CARGO", None),
            ("", None),
            (None, None),
        ]
    )
    def test_body_type_code(self, body_type, expected):
        assert body_type_code(body_type) == expected

    def test_codes_are_merged_and_deduplicated(self):
        assert surcharge_codes("LIFT", ["cold_chain", "LIFT", " "]) == ["COLD_CHAIN", "LIFT"]

    def test_no_codes(self):
        assert surcharge_codes(None, []) == []
