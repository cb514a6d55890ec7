"""
Appointment status transitions.

Requested -> Scheduled -> Confirmed -> Completed is the happy path;
Declined and Cancelled can be reached from any open state and reopened.
"""
from typing import Dict, FrozenSet

from careshare.core.errors import IllegalTransitionError
from careshare.database.models import AppointmentStatus as Status

TRANSITIONS: Dict[Status, FrozenSet[Status]] = {
    Status.REQUESTED: frozenset({Status.SCHEDULED, Status.DECLINED, Status.CANCELLED}),
    Status.SCHEDULED: frozenset({Status.CONFIRMED, Status.DECLINED, Status.CANCELLED, Status.COMPLETED}),
    Status.CONFIRMED: frozenset({Status.COMPLETED, Status.CANCELLED, Status.DECLINED}),
    Status.DECLINED: frozenset({Status.REQUESTED, Status.SCHEDULED}),
    Status.CANCELLED: frozenset({Status.REQUESTED, Status.SCHEDULED}),
    Status.COMPLETED: frozenset(),
}


def is_allowed(current: Status, target: Status) -> bool:
    return current == target or target in TRANSITIONS.get(current, frozenset())


def check_transition(current: str, target: str, strict: bool) -> None:
    """Raise IllegalTransitionError for a disallowed move when `strict` is on"""
    if not strict:
        return
    current_status, target_status = Status(current), Status(target)
    if not is_allowed(current_status, target_status):
        raise IllegalTransitionError(
            f"Cannot move appointment from {current_status.value} to {target_status.value}",
            details={
                "from": current_status.value,
                "to": target_status.value,
                "allowed": sorted(s.value for s in TRANSITIONS[current_status]),
            }
        )
