"""Unit tests for the fare table and trip distance."""

import pytest

from greenbharat.domain.distance import haversine_km, trip_distance_km
from greenbharat.domain.entities import Location, Place
from greenbharat.domain.enums import CarClass
from greenbharat.domain.pricing import FARE_TABLE, FareEstimator, FareTier


class TestFareTier:
    def test_base_plus_distance(self):
        assert FareTier(base_fare=50.0, rate_per_km=15.0).price(10.0) == 200.0

    def test_rounds_half_up(self):
        assert FareTier(base_fare=10.0, rate_per_km=1.0).price(0.5) == 11.0
        assert FareTier(base_fare=10.0, rate_per_km=1.0).price(1.5) == 12.0

    def test_rounds_down_below_half(self):
        assert FareTier(base_fare=10.0, rate_per_km=1.0).price(0.49) == 10.0

    def test_zero_distance_is_base_fare(self):
        assert FareTier(base_fare=40.0, rate_per_km=12.0).price(0.0) == 40.0


class TestFareEstimator:
    def setup_method(self):
        self.fares = FareEstimator()

    @pytest.mark.parametrize(
        "car_class, expected",
        [
            (CarClass.MINI, 100.0),   # 40 + 5*12
            (CarClass.SEDAN, 135.0),  # 60 + 5*15
            (CarClass.SUV, 170.0),    # 80 + 5*18
        ],
    )
    def test_nominal_distance_fares(self, car_class, expected):
        assert self.fares.estimate(car_class) == expected

    def test_accepts_plain_strings(self):
        assert self.fares.estimate("suv") == 170.0

    def test_unknown_class_priced_as_cheapest(self):
        assert self.fares.estimate("limousine") == 100.0
        assert self.fares.tier_for("limousine") == FARE_TABLE[CarClass.MINI]

    def test_explicit_distance(self):
        assert self.fares.estimate(CarClass.SEDAN, 10.0) == 210.0

    def test_configurable_nominal_distance(self):
        assert FareEstimator(nominal_distance_km=2.0).estimate(CarClass.MINI) == 64.0

    def test_deterministic(self):
        assert self.fares.estimate(CarClass.SUV, 3.3) == self.fares.estimate(
            CarClass.SUV, 3.3
        )

    def test_custom_table_lowest_tier(self):
        fares = FareEstimator(
            table={
                CarClass.SEDAN: FareTier(30.0, 10.0),
                CarClass.SUV: FareTier(90.0, 20.0),
            }
        )
        # MINI is missing from this table: cheapest tier applies.
        assert fares.estimate(CarClass.MINI, 1.0) == 40.0


class TestDistance:
    def test_same_point_is_zero(self):
        here = Location(19.0, 72.0)
        assert haversine_km(here, here) == 0.0

    def test_known_distance(self):
        # Mumbai airport → Andheri ~3.6 km (approx)
        d = haversine_km(Location(19.0896, 72.8656), Location(19.1176, 72.8490))
        assert 3.0 < d < 5.0

    def test_symmetric(self):
        a, b = Location(19.0, 72.0), Location(20.0, 73.0)
        assert abs(haversine_km(a, b) - haversine_km(b, a)) < 1e-6

    def test_unknown_without_coordinates(self):
        located = Place("Airport", Location(19.0896, 72.8656))
        assert trip_distance_km(located, Place("Andheri")) is None
        assert trip_distance_km(Place("Airport"), located) is None

    def test_known_with_both_coordinates(self):
        a = Place("Airport", Location(19.0896, 72.8656))
        b = Place("Andheri", Location(19.1176, 72.8490))
        assert trip_distance_km(a, b) == haversine_km(a.location, b.location)
