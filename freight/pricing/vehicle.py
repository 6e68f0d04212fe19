from enum import Enum
from typing import Optional


class VehicleClass(str, Enum):
    """Truck capacity tiers, smallest first.

    Declaration order matters: ``next_higher`` walks it to suggest a bigger
    vehicle when the cargo weight does not fit.
    """
    DAMAS = "DAMAS"
    LABO = "LABO"
    TON_1 = "TON_1"
    TON_1_4 = "TON_1_4"
    TON_2_5 = "TON_2_5"
    TON_3_5 = "TON_3_5"
    TON_5 = "TON_5"
    TON_5_AXLE = "TON_5_AXLE"
    TON_8 = "TON_8"
    TON_11 = "TON_11"
    TON_14 = "TON_14"
    TON_15 = "TON_15"
    TON_18 = "TON_18"
    TON_25 = "TON_25"

    def __str__(self):
        return self.value

    @property
    def default_capacity_kg(self) -> int:
        return DEFAULT_CAPACITY_KG[self]

    def next_higher(self) -> Optional["VehicleClass"]:
        members = list(VehicleClass)
        index = members.index(self)
        if index + 1 < len(members):
            return members[index + 1]
        return None

    @classmethod
    def parse(cls, value) -> Optional["VehicleClass"]:
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


DEFAULT_CAPACITY_KG = {
    VehicleClass.DAMAS: 350,
    VehicleClass.LABO: 500,
    VehicleClass.TON_1: 1000,
    VehicleClass.TON_1_4: 1400,
    VehicleClass.TON_2_5: 2500,
    VehicleClass.TON_3_5: 3500,
    VehicleClass.TON_5: 5000,
    VehicleClass.TON_5_AXLE: 5500,
    VehicleClass.TON_8: 8000,
    VehicleClass.TON_11: 11000,
    VehicleClass.TON_14: 14000,
    VehicleClass.TON_15: 15000,
    VehicleClass.TON_18: 18000,
    VehicleClass.TON_25: 25000,
}
