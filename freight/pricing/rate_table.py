import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from freight.core.config import settings
from freight.pricing.distance_range import resolve_key
from freight.pricing.vehicle import VehicleClass

logger = logging.getLogger(__name__)


class RateTableError(RuntimeError):
    """The rate table resource is missing or malformed."""


class RateTable:
    """Immutable ``range key -> vehicle class -> base rate`` lookup."""

    def __init__(self, ranges: Mapping[str, Mapping[str, int]]):
        self._ranges = MappingProxyType({
            key: MappingProxyType({name: int(rate) for name, rate in rates.items()})
            for key, rates in ranges.items()
        })

    @classmethod
    def load(cls, path) -> "RateTable":
        try:
            with open(Path(path), "r", encoding="utf-8") as fh:
                root = json.load(fh)
            ranges = root["ranges"]
            if not isinstance(ranges, dict) or not ranges:
                raise ValueError("'ranges' must be a non-empty object")
            table = cls(ranges)
        except Exception as e:
            raise RateTableError(f"Failed to load rate table from {path}: {e}") from e
        logger.info(f"Loaded rate table with {len(table._ranges)} distance ranges from {path}")
        return table

    @property
    def ranges(self) -> Mapping[str, Mapping[str, int]]:
        return self._ranges

    def lookup(self, distance_km: int, vehicle_class: VehicleClass) -> Optional[int]:
        range_key = resolve_key(distance_km)
        if range_key is None or vehicle_class is None:
            return None
        range_rates = self._ranges.get(range_key)
        if range_rates is None:
            return None
        return range_rates.get(VehicleClass(vehicle_class).value)


@lru_cache(maxsize=1)
def get_rate_table() -> RateTable:
    return RateTable.load(settings.RATE_TABLE_PATH)
