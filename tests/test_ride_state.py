"""Unit tests for the ride lifecycle state machine."""

from datetime import datetime, timedelta, timezone

import pytest

from ridehail.domain.entities import Actor, Ride
from ridehail.domain.enums import PaymentStatus, RideStatus, UserRole
from ridehail.domain.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateTransition,
    ValidationError,
)
from ridehail.domain.lifecycle import RideLifecycle

RIDER = Actor(user_id="rider-1", role=UserRole.USER)
OTHER_RIDER = Actor(user_id="rider-2", role=UserRole.USER)
ADMIN = Actor(user_id="admin-1", role=UserRole.ADMIN)
DRIVER = Actor(user_id="driver-user-1", role=UserRole.DRIVER, driver_profile_id="profile-1")
OTHER_DRIVER = Actor(user_id="driver-user-2", role=UserRole.DRIVER, driver_profile_id="profile-2")

NON_TERMINAL = [
    RideStatus.PENDING,
    RideStatus.SEARCHING,
    RideStatus.AWAITING_DRIVER_CONFIRMATION,
    RideStatus.ACCEPTED,
    RideStatus.PICKED_UP,
    RideStatus.IN_PROGRESS,
]


class _Clock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def lifecycle():
    return RideLifecycle(clock=_Clock())


def _ride(status=RideStatus.PENDING, driver_id=None):
    return Ride(id="ride-1", rider_id=RIDER.user_id, status=status, driver_id=driver_id)


class TestInitialState:
    def test_new_ride_is_pending_with_no_timestamps(self):
        ride = Ride()
        assert ride.status == RideStatus.PENDING
        assert ride.accepted_at is None
        assert ride.picked_up_at is None
        assert ride.started_at is None
        assert ride.completed_at is None
        assert ride.cancelled_at is None


class TestRiderTransitions:
    def test_rider_requests_search(self, lifecycle):
        ride = lifecycle.request_search(RIDER, _ride())
        assert ride.status == RideStatus.SEARCHING

    def test_other_rider_cannot_touch_ride(self, lifecycle):
        with pytest.raises(AuthorizationError):
            lifecycle.request_search(OTHER_RIDER, _ride())

    def test_rider_cannot_move_searching_to_awaiting(self, lifecycle):
        with pytest.raises(AuthorizationError):
            lifecycle.transition(
                RIDER,
                _ride(RideStatus.SEARCHING),
                RideStatus.AWAITING_DRIVER_CONFIRMATION,
            )

    def test_rider_cannot_complete(self, lifecycle):
        with pytest.raises(AuthorizationError):
            lifecycle.transition(
                RIDER, _ride(RideStatus.IN_PROGRESS, "profile-1"), RideStatus.COMPLETED
            )

    @pytest.mark.parametrize("status", NON_TERMINAL)
    def test_rider_cancels_from_any_non_terminal_state(self, lifecycle, status):
        ride = lifecycle.cancel(RIDER, _ride(status, "profile-1"))
        assert ride.status == RideStatus.CANCELLED
        assert ride.cancelled_at is not None

    @pytest.mark.parametrize("status", [RideStatus.COMPLETED, RideStatus.CANCELLED])
    def test_terminal_rides_cannot_be_cancelled(self, lifecycle, status):
        with pytest.raises(ConflictError, match=status.value):
            lifecycle.cancel(RIDER, _ride(status))

    @pytest.mark.parametrize("status", [RideStatus.COMPLETED, RideStatus.CANCELLED])
    def test_stranger_on_terminal_ride_is_unauthorized(self, lifecycle, status):
        with pytest.raises(AuthorizationError) as exc:
            lifecycle.cancel(OTHER_RIDER, _ride(status))
        assert status.value not in str(exc.value)

    def test_stranger_illegal_edge_is_unauthorized(self, lifecycle):
        with pytest.raises(AuthorizationError):
            lifecycle.transition(OTHER_DRIVER, _ride(), RideStatus.COMPLETED)


class TestAssignment:
    def test_assign_pending_ride(self, lifecycle):
        ride = lifecycle.assign_driver(_ride(), "profile-1")
        assert ride.status == RideStatus.AWAITING_DRIVER_CONFIRMATION
        assert ride.driver_id == "profile-1"
        assert ride.accepted_at is not None

    @pytest.mark.parametrize(
        "status",
        [s for s in RideStatus if s != RideStatus.PENDING],
    )
    def test_assign_requires_pending(self, lifecycle, status):
        with pytest.raises(InvalidStateTransition):
            lifecycle.assign_driver(_ride(status), "profile-1")


class TestDriverTransitions:
    def _assigned(self, lifecycle):
        return lifecycle.assign_driver(_ride(), "profile-1")

    def test_assigned_driver_accepts(self, lifecycle):
        ride = self._assigned(lifecycle)
        stamped = ride.accepted_at
        lifecycle.accept(DRIVER, ride)
        assert ride.status == RideStatus.ACCEPTED
        # First stamp (at assignment) is kept
        assert ride.accepted_at == stamped

    def test_other_driver_cannot_accept(self, lifecycle):
        with pytest.raises(AuthorizationError):
            lifecycle.accept(OTHER_DRIVER, self._assigned(lifecycle))

    def test_accept_outside_awaiting_fails(self, lifecycle):
        ride = self._assigned(lifecycle)
        lifecycle.accept(DRIVER, ride)
        with pytest.raises(InvalidStateTransition):
            lifecycle.accept(DRIVER, ride)

    def test_decline_cancels(self, lifecycle):
        ride = lifecycle.decline(DRIVER, self._assigned(lifecycle))
        assert ride.status == RideStatus.CANCELLED
        assert ride.cancelled_at is not None

    def test_full_trip(self, lifecycle):
        ride = self._assigned(lifecycle)
        ride.payment_status = PaymentStatus.FAILED
        lifecycle.accept(DRIVER, ride)
        lifecycle.transition(DRIVER, ride, RideStatus.PICKED_UP)
        lifecycle.transition(DRIVER, ride, RideStatus.IN_PROGRESS)
        lifecycle.transition(DRIVER, ride, RideStatus.COMPLETED)

        assert ride.status == RideStatus.COMPLETED
        assert ride.accepted_at < ride.picked_up_at < ride.started_at < ride.completed_at
        assert ride.payment_status == PaymentStatus.PENDING
        assert ride.cancelled_at is None

    def test_driver_cannot_skip_states(self, lifecycle):
        ride = self._assigned(lifecycle)
        lifecycle.accept(DRIVER, ride)
        with pytest.raises(InvalidStateTransition):
            lifecycle.transition(DRIVER, ride, RideStatus.COMPLETED)

    def test_unassigned_driver_cannot_progress(self, lifecycle):
        ride = _ride(RideStatus.ACCEPTED, "profile-1")
        with pytest.raises(AuthorizationError):
            lifecycle.transition(OTHER_DRIVER, ride, RideStatus.PICKED_UP)

    def test_driver_cannot_start_search(self, lifecycle):
        with pytest.raises(AuthorizationError):
            lifecycle.request_search(DRIVER, _ride())


class TestAdministrator:
    def test_admin_cannot_accept_on_drivers_behalf(self, lifecycle):
        ride = lifecycle.assign_driver(_ride(), "profile-1")
        with pytest.raises(AuthorizationError):
            lifecycle.transition(ADMIN, ride, RideStatus.ACCEPTED)

    def test_admin_moves_searching_to_awaiting_with_driver(self, lifecycle):
        ride = lifecycle.transition(
            ADMIN,
            _ride(RideStatus.SEARCHING, "profile-1"),
            RideStatus.AWAITING_DRIVER_CONFIRMATION,
        )
        assert ride.status == RideStatus.AWAITING_DRIVER_CONFIRMATION

    def test_awaiting_without_driver_refused(self, lifecycle):
        ride = _ride(RideStatus.SEARCHING)
        with pytest.raises(InvalidStateTransition, match="no driver"):
            lifecycle.transition(ADMIN, ride, RideStatus.AWAITING_DRIVER_CONFIRMATION)
        assert ride.status == RideStatus.SEARCHING

    @pytest.mark.parametrize(
        "target",
        [
            RideStatus.AWAITING_DRIVER_CONFIRMATION,
            RideStatus.ACCEPTED,
            RideStatus.PICKED_UP,
            RideStatus.IN_PROGRESS,
            RideStatus.COMPLETED,
        ],
    )
    def test_override_into_driver_states_needs_driver(self, lifecycle, target):
        ride = _ride()
        with pytest.raises(InvalidStateTransition):
            lifecycle.override(ride, target)
        assert ride.status == RideStatus.PENDING
        assert ride.completed_at is None

    def test_driverless_ride_can_still_be_cancelled(self, lifecycle):
        ride = lifecycle.override(_ride(RideStatus.SEARCHING), RideStatus.CANCELLED)
        assert ride.status == RideStatus.CANCELLED

    def test_override_jumps_forward(self, lifecycle):
        ride = lifecycle.override(_ride(driver_id="profile-1"), RideStatus.IN_PROGRESS)
        assert ride.status == RideStatus.IN_PROGRESS
        assert ride.started_at is not None
        assert ride.accepted_at is None

    def test_override_reentry_keeps_first_stamp(self, lifecycle):
        ride = lifecycle.override(_ride(driver_id="profile-1"), RideStatus.ACCEPTED)
        first = ride.accepted_at
        lifecycle.override(ride, RideStatus.ACCEPTED)
        assert ride.accepted_at == first

    def test_override_cannot_go_backwards(self, lifecycle):
        with pytest.raises(InvalidStateTransition):
            lifecycle.override(_ride(RideStatus.PICKED_UP), RideStatus.SEARCHING)

    def test_override_cannot_leave_terminal(self, lifecycle):
        with pytest.raises(InvalidStateTransition):
            lifecycle.override(_ride(RideStatus.CANCELLED), RideStatus.COMPLETED)

    def test_override_to_completed_resets_payment(self, lifecycle):
        ride = _ride(RideStatus.IN_PROGRESS, "profile-1")
        ride.payment_status = PaymentStatus.REFUNDED
        lifecycle.override(ride, RideStatus.COMPLETED)
        assert ride.payment_status == PaymentStatus.PENDING

    @pytest.mark.parametrize(
        "status", [RideStatus.ACCEPTED, RideStatus.PICKED_UP, RideStatus.IN_PROGRESS]
    )
    def test_complete_ride_under_way(self, lifecycle, status):
        ride = lifecycle.complete(_ride(status, "profile-1"))
        assert ride.status == RideStatus.COMPLETED
        assert ride.completed_at is not None

    @pytest.mark.parametrize(
        "status", [RideStatus.PENDING, RideStatus.SEARCHING, RideStatus.CANCELLED]
    )
    def test_complete_requires_ride_under_way(self, lifecycle, status):
        with pytest.raises(InvalidStateTransition):
            lifecycle.complete(_ride(status))


class TestRating:
    def test_rate_completed_ride(self, lifecycle):
        ride = lifecycle.record_rating(RIDER, _ride(RideStatus.COMPLETED), 4, "Smooth")
        assert ride.rider_rating == 4
        assert ride.rider_feedback == "Smooth"

    def test_rating_twice_conflicts(self, lifecycle):
        ride = lifecycle.record_rating(RIDER, _ride(RideStatus.COMPLETED), 4)
        with pytest.raises(ConflictError):
            lifecycle.record_rating(RIDER, ride, 5)
        assert ride.rider_rating == 4

    def test_only_completed_rides_can_be_rated(self, lifecycle):
        with pytest.raises(ConflictError):
            lifecycle.record_rating(RIDER, _ride(RideStatus.IN_PROGRESS), 4)

    def test_only_the_rider_can_rate(self, lifecycle):
        with pytest.raises(AuthorizationError):
            lifecycle.record_rating(OTHER_RIDER, _ride(RideStatus.COMPLETED), 4)

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, lifecycle, rating):
        with pytest.raises(ValidationError):
            lifecycle.record_rating(RIDER, _ride(RideStatus.COMPLETED), rating)
