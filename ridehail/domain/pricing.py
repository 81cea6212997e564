"""
Fare Estimation Engine
======================

Formula
-------
duration      = round(distance_km / 30 km/h x 60)
distance_fare = round(distance_km x per_km)
time_fare     = round(duration x per_minute)
subtotal      = base_fare + distance_fare + time_fare
service_fee   = round(subtotal x service_fee_percent / 100)
total_fare    = round(subtotal + service_fee)

* Every ``round`` is independent and rounds halves up (2.5 -> 3), so the
  breakdown always adds up exactly as shown to the rider.
* The rider is also shown a duration window:
  ``[max(5, duration - 5), duration + 5]`` minutes.

Tariffs are an immutable table handed to the estimator, so a different
market can be priced by injecting another table.

Complexity: O(1) per quote.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .distance import haversine_km
from .entities import Location
from .enums import RideCategory
from .errors import ValidationError

AVERAGE_SPEED_KMH = 30.0
MIN_DURATION_MINUTES = 5
DURATION_WINDOW_MINUTES = 5


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


# ── Tariffs ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Tariff:
    base_fare: int
    per_km: int
    per_minute: int
    service_fee_percent: int


DEFAULT_TARIFFS: Mapping[RideCategory, Tariff] = MappingProxyType(
    {
        RideCategory.BICYCLE: Tariff(
            base_fare=200, per_km=50, per_minute=10, service_fee_percent=5
        ),
        RideCategory.MOTORCYCLE: Tariff(
            base_fare=300, per_km=100, per_minute=15, service_fee_percent=8
        ),
        RideCategory.CAR: Tariff(
            base_fare=500, per_km=150, per_minute=20, service_fee_percent=10
        ),
    }
)


@dataclass(frozen=True)
class FareQuote:
    category: RideCategory
    distance_km: float
    duration_minutes: int
    min_duration_minutes: int
    max_duration_minutes: int
    base_fare: int
    distance_fare: int
    time_fare: int
    subtotal: int
    service_fee: int
    total_fare: int
    per_km_rate: int
    currency: str


# ── Estimator ─────────────────────────────────────────────────────────


class FareEstimator:
    """Pure fare calculator: coordinates + category -> :class:`FareQuote`."""

    def __init__(
        self,
        tariffs: Mapping[RideCategory, Tariff] = DEFAULT_TARIFFS,
        currency: str = "NGN",
    ):
        self.tariffs = MappingProxyType(dict(tariffs))
        self.currency = currency

    def tariff_for(self, category: RideCategory | str) -> Tariff:
        try:
            key = RideCategory(category)
        except ValueError:
            raise ValidationError(f"Invalid ride type: {category}") from None
        tariff = self.tariffs.get(key)
        if tariff is None:
            raise ValidationError(f"Invalid ride type: {category}")
        return tariff

    @staticmethod
    def estimate_duration(distance_km: float) -> int:
        return round_half_up(distance_km / AVERAGE_SPEED_KMH * 60)

    def estimate(
        self,
        pickup: Location,
        destination: Location,
        category: RideCategory | str,
    ) -> FareQuote:
        coords = (
            pickup.latitude,
            pickup.longitude,
            destination.latitude,
            destination.longitude,
        )
        if not all(
            isinstance(c, (int, float)) and math.isfinite(c) for c in coords
        ):
            raise ValidationError("Coordinates must be finite numbers")

        distance = haversine_km(*coords)
        return self.quote_for_distance(distance, category)

    def quote_for_distance(
        self,
        distance_km: float,
        category: RideCategory | str,
    ) -> FareQuote:
        tariff = self.tariff_for(category)
        if not math.isfinite(distance_km) or distance_km < 0:
            raise ValidationError("Distance must be a non-negative number")

        duration = self.estimate_duration(distance_km)
        distance_fare = round_half_up(distance_km * tariff.per_km)
        time_fare = round_half_up(duration * tariff.per_minute)
        subtotal = tariff.base_fare + distance_fare + time_fare
        service_fee = round_half_up(subtotal * tariff.service_fee_percent / 100)

        return FareQuote(
            category=RideCategory(category),
            distance_km=distance_km,
            duration_minutes=duration,
            min_duration_minutes=max(
                MIN_DURATION_MINUTES, duration - DURATION_WINDOW_MINUTES
            ),
            max_duration_minutes=duration + DURATION_WINDOW_MINUTES,
            base_fare=tariff.base_fare,
            distance_fare=distance_fare,
            time_fare=time_fare,
            subtotal=subtotal,
            service_fee=service_fee,
            total_fare=round_half_up(subtotal + service_fee),
            per_km_rate=tariff.per_km,
            currency=self.currency,
        )
