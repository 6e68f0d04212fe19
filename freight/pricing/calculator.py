"""Deterministic freight price estimate.

The estimate is a three-point (PERT) average over the cheapest and most
expensive reading of the selected surcharges:

    total_min = base * mult_min + add_min
    total_max = base * mult_max + add_max
    mid       = round((total_min + total_max) / 2)
    weighted  = round((total_min + 4 * mid + total_max) / 6)
    fee       = round(weighted * platform_fee_rate)
    final     = weighted + fee

and, for combined shipments, ``final - round(final * discount_rate)``.
All rounding is half-up to whole won.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from functools import lru_cache
from typing import Iterable, Optional

from freight.core.config import settings
from freight.core.enums import LoadHandlingMethod
from freight.core.errors import ErrorKind, FreightError
from freight.pricing.distance_range import resolve_key
from freight.pricing.rate_table import RateTable, get_rate_table
from freight.pricing.surcharges import SurchargeRule
from freight.pricing.vehicle import VehicleClass

ONE = Decimal("1")
TWO = Decimal("2")
FOUR = Decimal("4")
SIX = Decimal("6")


class PricingError(FreightError):

    def __init__(self, message: str):
        super().__init__(ErrorKind.INVALID_INPUT, message)


def round_half_up(value: Decimal) -> Decimal:
    return Decimal(value).quantize(ONE, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingResult:
    vehicle_class: VehicleClass
    distance_range_key: str
    rate: Decimal
    base_total: Decimal
    extra_min: Decimal
    extra_max: Decimal
    total_min: Decimal
    total_max: Decimal
    total_mid: Decimal
    weighted: Decimal
    platform_fee_rate: Decimal
    platform_fee: Decimal
    final_charge: Decimal
    combined_shipment: bool
    combine_discount_rate: Decimal
    combine_discount: Decimal
    final_charge_after_discount: Decimal

    def to_dict(self) -> dict:
        data = asdict(self)
        data["vehicle_class"] = self.vehicle_class.value
        return data


@dataclass(frozen=True)
class _SurchargeSummary:
    extra_min: Decimal
    extra_max: Decimal
    total_min: Decimal
    total_max: Decimal


class PricingCalculator:

    def __init__(
        self,
        rate_table: RateTable,
        load_unload_driver_fee=None,
        platform_fee_rate=None,
        combine_discount_rate=None,
    ):
        self.rate_table = rate_table
        self.load_unload_driver_fee = Decimal(str(
            settings.LOAD_UNLOAD_DRIVER_FEE if load_unload_driver_fee is None else load_unload_driver_fee
        ))
        self.platform_fee_rate = Decimal(str(
            settings.PLATFORM_FEE_RATE if platform_fee_rate is None else platform_fee_rate
        ))
        self.combine_discount_rate = Decimal(str(
            settings.COMBINE_DISCOUNT_RATE if combine_discount_rate is None else combine_discount_rate
        ))

    def estimate(
        self,
        distance_km: int,
        vehicle_class: VehicleClass,
        surcharge_rules: Optional[Iterable[SurchargeRule]] = None,
        load_method: LoadHandlingMethod = LoadHandlingMethod.SHIPPER,
        unload_method: LoadHandlingMethod = LoadHandlingMethod.SHIPPER,
        combined_shipment: bool = False,
    ) -> PricingResult:
        range_key = resolve_key(distance_km)
        if range_key is None:
            raise PricingError("distance is outside supported ranges")
        vehicle = VehicleClass.parse(vehicle_class)
        rate = self.rate_table.lookup(distance_km, vehicle) if vehicle else None
        if rate is None:
            raise PricingError("unsupported vehicle class")

        rate_won = Decimal(rate)
        base_total = rate_won

        summary = self._calculate_surcharges(
            list(surcharge_rules or ()), base_total, vehicle, load_method, unload_method
        )
        total_mid = round_half_up((summary.total_min + summary.total_max) / TWO)
        weighted = round_half_up((summary.total_min + total_mid * FOUR + summary.total_max) / SIX)
        platform_fee = round_half_up(weighted * self.platform_fee_rate)
        final_charge = weighted + platform_fee

        combine_discount = Decimal(0)
        if combined_shipment:
            combine_discount = round_half_up(final_charge * self.combine_discount_rate)

        return PricingResult(
            vehicle_class=vehicle,
            distance_range_key=range_key,
            rate=rate_won,
            base_total=base_total,
            extra_min=summary.extra_min,
            extra_max=summary.extra_max,
            total_min=summary.total_min,
            total_max=summary.total_max,
            total_mid=total_mid,
            weighted=weighted,
            platform_fee_rate=self.platform_fee_rate,
            platform_fee=platform_fee,
            final_charge=final_charge,
            combined_shipment=bool(combined_shipment),
            combine_discount_rate=self.combine_discount_rate,
            combine_discount=combine_discount,
            final_charge_after_discount=final_charge - combine_discount,
        )

    def _calculate_surcharges(
        self,
        rules,
        base_total: Decimal,
        vehicle: VehicleClass,
        load_method: LoadHandlingMethod,
        unload_method: LoadHandlingMethod,
    ) -> _SurchargeSummary:
        if sum(1 for rule in rules if rule.is_multiplier) > 1:
            raise PricingError("conflicting multiplier options")

        add_min = Decimal(0)
        add_max = Decimal(0)
        mult_min = ONE
        mult_max = ONE

        for rule in rules:
            if rule.is_fixed_by_vehicle:
                fixed_add = rule.resolve_fixed_add(vehicle)
                if fixed_add is None:
                    raise PricingError(f"option unavailable for vehicle: {rule.code}")
                add_min += fixed_add
                add_max += fixed_add
            elif rule.is_additive:
                add_min += rule.min_add
                add_max += rule.max_add
            elif rule.is_multiplier:
                mult_min = rule.min_multiplier
                mult_max = rule.max_multiplier

        # handling fee applies per side
        for method in (load_method, unload_method):
            if method == LoadHandlingMethod.DRIVER:
                add_min += self.load_unload_driver_fee
                add_max += self.load_unload_driver_fee

        return _SurchargeSummary(
            extra_min=add_min,
            extra_max=add_max,
            total_min=base_total * mult_min + add_min,
            total_max=base_total * mult_max + add_max,
        )


@lru_cache(maxsize=1)
def get_pricing_calculator() -> PricingCalculator:
    return PricingCalculator(get_rate_table())
