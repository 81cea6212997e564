"""Unit tests for the driver candidate rules."""

import pytest

from ridehail.domain.enums import DriverStatus, RideCategory, VehicleType
from ridehail.domain.matching import (
    admin_assignment_accepts,
    admin_assignment_vehicle_type,
    rider_search_accepts,
    rider_search_vehicle_types,
)


def _rider_rule(category, vehicle_type, status=DriverStatus.ACTIVE, is_verified=True):
    return rider_search_accepts(
        category, status=status, is_verified=is_verified, vehicle_type=vehicle_type
    )


class TestRiderSearchRule:
    def test_bicycle_needs_driver_without_vehicle(self):
        assert _rider_rule(RideCategory.BICYCLE, None)
        assert not _rider_rule(RideCategory.BICYCLE, VehicleType.BICYCLE)

    def test_motorcycle_needs_motorcycle(self):
        assert _rider_rule(RideCategory.MOTORCYCLE, VehicleType.MOTORCYCLE)
        assert not _rider_rule(RideCategory.MOTORCYCLE, VehicleType.SEDAN)
        assert not _rider_rule(RideCategory.MOTORCYCLE, None)

    @pytest.mark.parametrize(
        "vehicle_type", [VehicleType.SEDAN, VehicleType.SUV, VehicleType.VAN]
    )
    def test_car_accepts_passenger_cars(self, vehicle_type):
        assert _rider_rule(RideCategory.CAR, vehicle_type)

    @pytest.mark.parametrize(
        "vehicle_type",
        [VehicleType.TRUCK, VehicleType.BUS, VehicleType.CAR, VehicleType.MOTORCYCLE, None],
    )
    def test_car_rejects_other_types(self, vehicle_type):
        assert not _rider_rule(RideCategory.CAR, vehicle_type)

    def test_unverified_driver_excluded(self):
        assert not _rider_rule(RideCategory.CAR, VehicleType.SEDAN, is_verified=False)

    @pytest.mark.parametrize(
        "status", [DriverStatus.INACTIVE, DriverStatus.PENDING, DriverStatus.SUSPENDED]
    )
    def test_inactive_profiles_excluded(self, status):
        assert not _rider_rule(RideCategory.CAR, VehicleType.SEDAN, status=status)

    def test_vehicle_type_sets(self):
        assert rider_search_vehicle_types(RideCategory.BICYCLE) is None
        assert rider_search_vehicle_types("motorcycle") == {VehicleType.MOTORCYCLE}


class TestAdminAssignmentRule:
    def test_label_must_match_exactly(self):
        assert admin_assignment_accepts(
            RideCategory.CAR, user_is_active=True, vehicle_type=VehicleType.CAR
        )
        assert not admin_assignment_accepts(
            RideCategory.CAR, user_is_active=True, vehicle_type=VehicleType.SEDAN
        )

    def test_vehicle_required(self):
        assert not admin_assignment_accepts(
            RideCategory.BICYCLE, user_is_active=True, vehicle_type=None
        )

    def test_inactive_user_excluded(self):
        assert not admin_assignment_accepts(
            RideCategory.MOTORCYCLE, user_is_active=False, vehicle_type=VehicleType.MOTORCYCLE
        )

    @pytest.mark.parametrize("category", list(RideCategory))
    def test_every_category_maps_to_a_vehicle_type(self, category):
        assert admin_assignment_vehicle_type(category).value == category.value

    def test_rules_disagree_on_sedans(self):
        assert _rider_rule(RideCategory.CAR, VehicleType.SEDAN)
        assert not admin_assignment_accepts(
            RideCategory.CAR, user_is_active=True, vehicle_type=VehicleType.SEDAN
        )
