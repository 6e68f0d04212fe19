import logging
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.errors import ErrorKind, FreightError, invalid_input
from freight.models.catalog import SurchargeOption
from freight.pricing.surcharges import STATIC_RULES, SurchargeRule, body_type_code

logger = logging.getLogger(__name__)


def surcharge_codes(vehicle_body_type: Optional[str], extra_codes: Iterable[str] = ()) -> List[str]:
    """Codes implied by the body type plus any explicitly requested ones."""
    codes = set()
    implied = body_type_code(vehicle_body_type)
    if implied:
        codes.add(implied)
    for code in extra_codes or ():
        if code and code.strip():
            codes.add(code.strip().upper())
    return sorted(codes)


async def resolve_rules(db: AsyncSession, codes: Iterable[str]) -> List[SurchargeRule]:
    codes = sorted({c.strip().upper() for c in (codes or ()) if c and c.strip()})
    if not codes:
        return []

    res = await db.execute(select(SurchargeOption).where(SurchargeOption.code.in_(codes)))
    options = {option.code: option for option in res.scalars().all()}

    rules = []
    for code in codes:
        option = options.get(code)
        if option is not None:
            if not option.enabled:
                raise invalid_input(f"surcharge option is disabled: {code}")
            try:
                rules.append(SurchargeRule.from_record(option, option.vehicle_rates))
            except ValueError as e:
                logger.error(f"Surcharge option {code} is misconfigured: {e}")
                raise FreightError(ErrorKind.INTERNAL, f"surcharge option is misconfigured: {code}") from e
        elif code in STATIC_RULES:
            rules.append(STATIC_RULES[code])
        else:
            raise invalid_input(f"unknown surcharge option: {code}")
    return rules
