"""
Ride Lifecycle State Machine
============================

States
------
pending -> searching -> awaiting_driver_confirmation -> accepted
        -> picked_up -> in_progress -> completed

Any non-terminal state may also move to ``cancelled``.  ``completed`` and
``cancelled`` are terminal.

Capabilities
------------
Which edge an actor may take is decided by one table keyed on the actor's
relationship to the ride (owning rider, assigned driver, administrator):

* rider   -- pending -> searching, cancel from any non-terminal state
* driver  -- every edge out of awaiting_driver_confirmation, accepted,
  picked_up and in_progress, but only on rides assigned to their profile
* admin   -- pending -> searching, searching -> awaiting/cancelled,
  every edge out of accepted, picked_up and in_progress, cancel from any
  non-terminal state, plus the forward-only override in
  :meth:`RideLifecycle.override`

Side effects
------------
Entering accepted / picked_up / in_progress / completed / cancelled stamps
the matching ``*_at`` field once; a later re-entry never overwrites it.
Entering ``completed`` resets ``payment_status`` to ``pending``.

A ride without ``driver_id`` never enters awaiting_driver_confirmation or
any later state except ``cancelled``; only :meth:`RideLifecycle.assign_driver`
attaches a driver, and it does so from ``pending``.

The machine works on anything shaped like a ride (the ORM model or the
:class:`~ridehail.domain.entities.Ride` dataclass) and never touches I/O.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from .entities import Actor
from .enums import (
    RIDE_TRANSITIONS,
    STATUS_ORDER,
    STATUS_TIMESTAMPS,
    TERMINAL_STATUSES,
    PaymentStatus,
    RideStatus,
)
from .errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateTransition,
    ValidationError,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Party(str, Enum):
    RIDER = "rider"
    DRIVER = "driver"
    ADMIN = "admin"


_DRIVER_STATES = frozenset(
    {
        RideStatus.AWAITING_DRIVER_CONFIRMATION,
        RideStatus.ACCEPTED,
        RideStatus.PICKED_UP,
        RideStatus.IN_PROGRESS,
    }
)

# States that only make sense once a driver is attached
_NEEDS_DRIVER = _DRIVER_STATES | {RideStatus.COMPLETED}


def _party_may(party: Party, current: RideStatus, target: RideStatus) -> bool:
    if party is Party.RIDER:
        return target == RideStatus.CANCELLED or (
            current == RideStatus.PENDING and target == RideStatus.SEARCHING
        )
    if party is Party.DRIVER:
        return current in _DRIVER_STATES
    # admin
    if target == RideStatus.CANCELLED:
        return True
    return current != RideStatus.AWAITING_DRIVER_CONFIRMATION


class RideLifecycle:
    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self.clock = clock

    # ── Capability check ──────────────────────────────────────────

    @staticmethod
    def parties(actor: Actor, ride) -> set[Party]:
        """Every role the actor plays on this ride (possibly several)."""
        found: set[Party] = set()
        if actor.is_admin:
            found.add(Party.ADMIN)
        if ride.rider_id == actor.user_id:
            found.add(Party.RIDER)
        if (
            ride.driver_id is not None
            and actor.driver_profile_id is not None
            and ride.driver_id == actor.driver_profile_id
        ):
            found.add(Party.DRIVER)
        return found

    def can_view(self, actor: Actor, ride) -> bool:
        return bool(self.parties(actor, ride))

    def check(self, actor: Actor, ride, target: RideStatus) -> None:
        """Raise unless *actor* may move *ride* to *target* right now."""
        # Strangers learn nothing about the ride's state
        parties = self.parties(actor, ride)
        if not parties:
            raise AuthorizationError("Not authorized to access this ride")

        current = RideStatus(ride.status)
        target = RideStatus(target)
        if current in TERMINAL_STATUSES:
            raise InvalidStateTransition(
                f"Ride is already {current.value}"
            )
        if target not in RIDE_TRANSITIONS[current]:
            raise InvalidStateTransition(
                f"Cannot transition from {current.value} to {target.value}"
            )
        if not any(_party_may(p, current, target) for p in parties):
            raise AuthorizationError(
                f"Not allowed to move ride from {current.value} to {target.value}"
            )

    # ── Transitions ───────────────────────────────────────────────

    def transition(self, actor: Actor, ride, target: RideStatus):
        self.check(actor, ride, target)
        self._enter(ride, RideStatus(target))
        return ride

    def request_search(self, actor: Actor, ride):
        return self.transition(actor, ride, RideStatus.SEARCHING)

    def cancel(self, actor: Actor, ride):
        return self.transition(actor, ride, RideStatus.CANCELLED)

    def accept(self, actor: Actor, ride):
        self._require_assigned_driver(actor, ride)
        self._require_status(ride, RideStatus.AWAITING_DRIVER_CONFIRMATION)
        return self.transition(actor, ride, RideStatus.ACCEPTED)

    def decline(self, actor: Actor, ride):
        self._require_assigned_driver(actor, ride)
        self._require_status(ride, RideStatus.AWAITING_DRIVER_CONFIRMATION)
        return self.transition(actor, ride, RideStatus.CANCELLED)

    def assign_driver(self, ride, driver_profile_id: str):
        """Attach a driver profile to a pending ride.

        The caller resolves user ids to profile ids beforehand; only a
        canonical profile id is ever stored on the ride.
        """
        current = RideStatus(ride.status)
        if current != RideStatus.PENDING:
            raise InvalidStateTransition(
                f"Ride cannot be assigned. Current status: {current.value}"
            )
        ride.driver_id = driver_profile_id
        ride.accepted_at = self.clock()
        ride.status = RideStatus.AWAITING_DRIVER_CONFIRMATION
        return ride

    def complete(self, ride):
        """Administrative completion of a ride that is under way."""
        current = RideStatus(ride.status)
        if current not in (
            RideStatus.ACCEPTED,
            RideStatus.PICKED_UP,
            RideStatus.IN_PROGRESS,
        ):
            raise InvalidStateTransition(
                f"Ride cannot be completed. Current status: {current.value}"
            )
        self._enter(ride, RideStatus.COMPLETED)
        return ride

    def override(self, ride, target: RideStatus):
        """Administrative status patch: forward jumps, re-entry or cancel."""
        current = RideStatus(ride.status)
        target = RideStatus(target)
        if current in TERMINAL_STATUSES:
            raise InvalidStateTransition(
                f"Ride is already {current.value}"
            )
        if target != RideStatus.CANCELLED and STATUS_ORDER.index(
            target
        ) < STATUS_ORDER.index(current):
            raise InvalidStateTransition(
                f"Cannot move ride back from {current.value} to {target.value}"
            )
        self._enter(ride, target)
        return ride

    # ── Rating ────────────────────────────────────────────────────

    def record_rating(
        self,
        actor: Actor,
        ride,
        rating: int,
        feedback: Optional[str] = None,
    ):
        if ride.rider_id != actor.user_id:
            raise AuthorizationError("Only the rider can rate this ride")
        if not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        if RideStatus(ride.status) != RideStatus.COMPLETED:
            raise ConflictError("Can only rate completed rides")
        if ride.rider_rating is not None:
            raise ConflictError("Ride already rated")
        ride.rider_rating = rating
        ride.rider_feedback = feedback
        return ride

    # ── Internals ─────────────────────────────────────────────────

    def _enter(self, ride, target: RideStatus) -> None:
        if target in _NEEDS_DRIVER and ride.driver_id is None:
            raise InvalidStateTransition(
                f"Ride has no driver assigned; cannot move to {target.value}"
            )
        ride.status = target
        field = STATUS_TIMESTAMPS.get(target)
        if field and getattr(ride, field) is None:
            setattr(ride, field, self.clock())
        if target == RideStatus.COMPLETED:
            ride.payment_status = PaymentStatus.PENDING

    @staticmethod
    def _require_assigned_driver(actor: Actor, ride) -> None:
        if (
            actor.driver_profile_id is None
            or ride.driver_id != actor.driver_profile_id
        ):
            raise AuthorizationError("You are not assigned to this ride")

    @staticmethod
    def _require_status(ride, expected: RideStatus) -> None:
        current = RideStatus(ride.status)
        if current != expected:
            raise InvalidStateTransition(
                f"Ride is not awaiting confirmation. Current status: {current.value}"
            )
