"""
Driver Candidate Rules
======================

Two rules decide which drivers are offered for a ride.  Both return at most
``MAX_CANDIDATES`` profiles in profile-creation order; there is no ranking
by distance or rating.

1. **Rider search** (rider browsing drivers for a ``searching`` ride).
   Profile must be ``active`` and verified, then by category:

   ============  ==========================================
   bicycle       driver has *no* vehicle assigned
   motorcycle    vehicle type is ``motorcycle``
   car           vehicle type in {sedan, suv, van}
   ============  ==========================================

2. **Admin assignment** (administrator picking a driver).
   Owning user account must be active, a vehicle must be assigned, and the
   vehicle type label must equal the ride category label exactly
   (so only ``car``/``motorcycle``/``bicycle`` vehicles ever qualify).

The two rules intentionally disagree (a sedan driver is offered to a rider
asking for a car but not to the administrator); both are kept as they are.

Complexity: O(1) per predicate; the repository filters in SQL and the
predicates double as the reference for tests.
"""

from __future__ import annotations

from typing import Optional

from .enums import DriverStatus, RideCategory, VehicleType

MAX_CANDIDATES = 10

CAR_VEHICLE_TYPES = frozenset({VehicleType.SEDAN, VehicleType.SUV, VehicleType.VAN})


def rider_search_vehicle_types(
    category: RideCategory,
) -> Optional[frozenset[VehicleType]]:
    """Vehicle types acceptable for *category*; ``None`` means no vehicle."""
    category = RideCategory(category)
    if category == RideCategory.BICYCLE:
        return None
    if category == RideCategory.MOTORCYCLE:
        return frozenset({VehicleType.MOTORCYCLE})
    return CAR_VEHICLE_TYPES


def rider_search_accepts(
    category: RideCategory,
    *,
    status: DriverStatus,
    is_verified: bool,
    vehicle_type: Optional[VehicleType],
) -> bool:
    if DriverStatus(status) != DriverStatus.ACTIVE or not is_verified:
        return False
    allowed = rider_search_vehicle_types(category)
    if allowed is None:
        return vehicle_type is None
    return vehicle_type is not None and VehicleType(vehicle_type) in allowed


def admin_assignment_vehicle_type(category: RideCategory) -> VehicleType:
    """The single vehicle type whose label equals the category label."""
    return VehicleType(RideCategory(category).value)


def admin_assignment_accepts(
    category: RideCategory,
    *,
    user_is_active: bool,
    vehicle_type: Optional[VehicleType],
) -> bool:
    if not user_is_active or vehicle_type is None:
        return False
    return VehicleType(vehicle_type) == admin_assignment_vehicle_type(category)
