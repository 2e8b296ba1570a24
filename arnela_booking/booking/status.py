"""Appointment lifecycle rules and the actions each status allows."""

from datetime import datetime
from typing import Dict, FrozenSet, Optional

from ..errors import BookingValidationError, InvalidStatusTransitionError
from ..models import Appointment, AppointmentStatus
from ..utils.helpers import utcnow

Status = AppointmentStatus

TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    Status.PENDING: frozenset({Status.CONFIRMED, Status.CANCELLED}),
    Status.CONFIRMED: frozenset({Status.COMPLETED, Status.CANCELLED, Status.RESCHEDULED}),
    Status.RESCHEDULED: frozenset({Status.CANCELLED}),
    Status.COMPLETED: frozenset(),
    Status.CANCELLED: frozenset(),
}

# Statuses an upcoming appointment can still be cancelled from.
CANCELLABLE = frozenset({Status.PENDING, Status.CONFIRMED, Status.RESCHEDULED})

STATUS_LABELS = {
    Status.PENDING: "Pendiente",
    Status.CONFIRMED: "Confirmada",
    Status.CANCELLED: "Cancelada",
    Status.COMPLETED: "Completada",
    Status.RESCHEDULED: "Reprogramada",
}


def status_label(status: AppointmentStatus) -> str:
    """Get the Spanish label for a status."""
    return STATUS_LABELS.get(AppointmentStatus(status), str(status))


def is_terminal(status: AppointmentStatus) -> bool:
    return not TRANSITIONS[AppointmentStatus(status)]


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    """Check whether the lifecycle allows going from current to target."""
    return AppointmentStatus(target) in TRANSITIONS[AppointmentStatus(current)]


def ensure_transition(current: AppointmentStatus, target: AppointmentStatus) -> None:
    """Raise InvalidStatusTransitionError unless current -> target is allowed."""
    if not can_transition(current, target):
        raise InvalidStatusTransitionError(
            f"Cannot move appointment from {AppointmentStatus(current).value} "
            f"to {AppointmentStatus(target).value}"
        )


def is_past(appointment: Appointment, now: Optional[datetime] = None) -> bool:
    return appointment.start_time <= (now or utcnow())


def is_upcoming(appointment: Appointment, now: Optional[datetime] = None) -> bool:
    return appointment.start_time > (now or utcnow())


def can_cancel(appointment: Appointment, now: Optional[datetime] = None) -> bool:
    """Upcoming pending, confirmed or rescheduled appointments can be cancelled."""
    return appointment.status in CANCELLABLE and is_upcoming(appointment, now)


def can_confirm(appointment: Appointment) -> bool:
    """Only pending appointments can be confirmed."""
    return appointment.status == Status.PENDING


def validate_cancellation_reason(reason: Optional[str]) -> str:
    """
    Check a cancellation reason before it is sent.

    Returns:
        The trimmed reason

    Raises:
        BookingValidationError: if the reason is empty or whitespace only
    """
    cleaned = (reason or "").strip()
    if not cleaned:
        raise BookingValidationError(
            "Por favor indica el motivo de la cancelación", field="reason"
        )
    return cleaned
