"""Surcharge rules applied on top of the base rate.

A rule is one of four kinds:

* ``ADD`` - additive amount with independent min/max bounds
* ``MULT`` - multiplier on the base total with independent min/max bounds
* ``FIXED`` - single additive amount used for both bounds
* ``FIXED_BY_VEHICLE`` - additive amount looked up by vehicle class

Rules come either from the built-in catalog below or from
``surcharge_options`` records (see ``SurchargeRule.from_record``); both
produce the same ``SurchargeRule`` value.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from freight.pricing.vehicle import VehicleClass


class SurchargeKind(str, Enum):
    ADD = "ADD"
    MULT = "MULT"
    FIXED = "FIXED"
    FIXED_BY_VEHICLE = "FIXED_BY_VEHICLE"

    def __str__(self):
        return self.value


def _dec(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class SurchargeRule:
    code: str
    kind: SurchargeKind
    min_add: Optional[Decimal] = None
    max_add: Optional[Decimal] = None
    min_multiplier: Optional[Decimal] = None
    max_multiplier: Optional[Decimal] = None
    vehicle_adds: Mapping[str, Decimal] = field(default_factory=dict, hash=False)

    @classmethod
    def additive(cls, code: str, min_add, max_add) -> "SurchargeRule":
        low, high = _dec(min_add), _dec(max_add)
        if low is None or high is None:
            raise ValueError(f"{code}: ADD rule needs both bounds")
        if low > high:
            raise ValueError(f"{code}: min amount exceeds max amount")
        return cls(code=code, kind=SurchargeKind.ADD, min_add=low, max_add=high)

    @classmethod
    def multiplier(cls, code: str, min_multiplier, max_multiplier) -> "SurchargeRule":
        low, high = _dec(min_multiplier), _dec(max_multiplier)
        if low is None or high is None:
            raise ValueError(f"{code}: MULT rule needs both bounds")
        if low > high:
            raise ValueError(f"{code}: min multiplier exceeds max multiplier")
        return cls(code=code, kind=SurchargeKind.MULT, min_multiplier=low, max_multiplier=high)

    @classmethod
    def fixed(cls, code: str, amount) -> "SurchargeRule":
        value = _dec(amount)
        if value is None:
            raise ValueError(f"{code}: FIXED rule needs an amount")
        return cls(code=code, kind=SurchargeKind.FIXED, min_add=value, max_add=value)

    @classmethod
    def fixed_by_vehicle(cls, code: str, amounts: Mapping) -> "SurchargeRule":
        adds = {VehicleClass(k).value: _dec(v) for k, v in (amounts or {}).items() if v is not None}
        return cls(code=code, kind=SurchargeKind.FIXED_BY_VEHICLE, vehicle_adds=MappingProxyType(adds))

    @classmethod
    def from_record(cls, option, vehicle_rates=()) -> "SurchargeRule":
        """Build a rule from a ``SurchargeOption`` row and its vehicle-rate rows."""
        kind = SurchargeKind(option.option_type)
        if kind == SurchargeKind.ADD:
            return cls.additive(option.code, option.min_add_won, option.max_add_won)
        if kind == SurchargeKind.MULT:
            return cls.multiplier(option.code, option.min_multiplier, option.max_multiplier)
        if kind == SurchargeKind.FIXED:
            amount = option.fixed_add_won if option.fixed_add_won is not None else option.min_add_won
            return cls.fixed(option.code, amount)
        return cls.fixed_by_vehicle(
            option.code,
            {rate.vehicle_type: rate.add_won for rate in vehicle_rates},
        )

    @property
    def is_additive(self) -> bool:
        return self.kind in (SurchargeKind.ADD, SurchargeKind.FIXED)

    @property
    def is_multiplier(self) -> bool:
        return self.kind == SurchargeKind.MULT

    @property
    def is_fixed_by_vehicle(self) -> bool:
        return self.kind == SurchargeKind.FIXED_BY_VEHICLE

    def resolve_fixed_add(self, vehicle_class: VehicleClass) -> Optional[Decimal]:
        if self.kind == SurchargeKind.FIXED:
            return self.min_add
        if self.kind == SurchargeKind.FIXED_BY_VEHICLE and vehicle_class is not None:
            return self.vehicle_adds.get(VehicleClass(vehicle_class).value)
        return None


def _by_vehicle(**amounts) -> dict:
    return {VehicleClass[name]: amount for name, amount in amounts.items()}


_HEAVY = ("TON_11", "TON_14", "TON_15", "TON_18", "TON_25")

STATIC_RULES = MappingProxyType({
    rule.code: rule for rule in (
        SurchargeRule.fixed_by_vehicle("LIFT_WINGBODY", _by_vehicle(
            TON_1=40000, TON_1_4=50000, TON_2_5=80000, TON_3_5=90000, TON_5=100000,
            TON_5_AXLE=120000, TON_8=120000, **{name: 150000 for name in _HEAVY},
        )),
        SurchargeRule.fixed_by_vehicle("LIFT_HORO", _by_vehicle(TON_1=15000, TON_1_4=25000)),
        SurchargeRule.fixed_by_vehicle("HORO_JABARA", _by_vehicle(TON_1=5000, TON_1_4=10000)),
        SurchargeRule.fixed("WINGBODY_TOP", 30000),
        SurchargeRule.fixed_by_vehicle("LIFT", _by_vehicle(
            TON_1=10000, TON_1_4=15000, TON_2_5=50000, TON_3_5=60000, TON_5=80000,
            TON_5_AXLE=100000, TON_8=100000, **{name: 130000 for name in _HEAVY},
        )),
        SurchargeRule.additive("COLD_CHAIN", 50000, 100000),
        SurchargeRule.additive("HANGER", 50000, 100000),
        SurchargeRule.multiplier("ANTI_VIBRATION_WINGBODY", "2.0", "2.5"),
    )
})

BODY_TYPE_CODES = {
    "LIFT": "LIFT",
    "LIFT_WINGBODY": "LIFT_WINGBODY",
    "TOP": "WINGBODY_TOP",
    "WINGBODY": None,
    "CARGO": None,
}


def body_type_code(vehicle_body_type: Optional[str]) -> Optional[str]:
    """Surcharge code implied by a vehicle body type, if any."""
    if not vehicle_body_type or not vehicle_body_type.strip():
        return None
    return BODY_TYPE_CODES.get(vehicle_body_type.strip().upper())
