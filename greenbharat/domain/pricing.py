"""
Fare Estimator  (table-driven)
==============================

Formula
-------
Fare = round_half_up(Base_Fare + Distance x Rate_Per_KM)

=========  =========  ===========
Class      Base fare  Rate per km
=========  =========  ===========
mini       40         12
sedan      60         15
suv        80         18
=========  =========  ===========

Unknown classes are priced at the cheapest tier.  When the trip distance
is unknown a nominal distance (5 km) is used; this is a placeholder for a
real distance computation, not a measured value.

Complexity: O(1) per estimate.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional, Union

from .enums import CarClass

NOMINAL_DISTANCE_KM = 5.0


@dataclass(frozen=True)
class FareTier:
    base_fare: float
    rate_per_km: float

    def price(self, distance_km: float) -> float:
        raw = Decimal(str(self.base_fare)) + Decimal(str(self.rate_per_km)) * Decimal(
            str(distance_km)
        )
        return float(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


FARE_TABLE: dict[CarClass, FareTier] = {
    CarClass.MINI: FareTier(base_fare=40.0, rate_per_km=12.0),
    CarClass.SEDAN: FareTier(base_fare=60.0, rate_per_km=15.0),
    CarClass.SUV: FareTier(base_fare=80.0, rate_per_km=18.0),
}


class FareEstimator:
    """Pure, deterministic fare lookup used by the trip lifecycle."""

    def __init__(
        self,
        nominal_distance_km: float = NOMINAL_DISTANCE_KM,
        table: Optional[Mapping[CarClass, FareTier]] = None,
    ):
        self.nominal_distance_km = nominal_distance_km
        self.table = dict(table if table is not None else FARE_TABLE)
        self.lowest_tier = min(
            self.table.values(), key=lambda t: (t.base_fare, t.rate_per_km)
        )

    def tier_for(self, car_class: Union[CarClass, str]) -> FareTier:
        try:
            return self.table.get(CarClass(car_class), self.lowest_tier)
        except ValueError:
            return self.lowest_tier

    def estimate(
        self,
        car_class: Union[CarClass, str],
        distance_km: Optional[float] = None,
    ) -> float:
        if distance_km is None:
            distance_km = self.nominal_distance_km
        return self.tier_for(car_class).price(distance_km)
