from sqlalchemy.ext.asyncio import AsyncSession

from freight.pricing.calculator import get_pricing_calculator
from freight.schemas.quote import PriceCalcRequest, PriceCalcResponse
from freight.services.surcharge_service import resolve_rules


async def calculate_price(db: AsyncSession, req: PriceCalcRequest) -> PriceCalcResponse:

    rules = await resolve_rules(db, req.surcharge_codes)
    result = get_pricing_calculator().estimate(
        req.distance_km,
        req.vehicle_type,
        rules,
        load_method=req.load_method,
        unload_method=req.unload_method,
        combined_shipment=req.combined_shipment,
    )
    breakdown = result.to_dict()
    breakdown["surcharge_codes"] = [rule.code for rule in rules]
    return PriceCalcResponse(
        final_price=int(result.final_charge_after_discount),
        price_breakdown=breakdown,
    )
