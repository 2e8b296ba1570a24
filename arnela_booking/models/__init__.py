"""Data models package."""

from .appointment import (
    Appointment,
    AppointmentFilter,
    AppointmentPage,
    AppointmentStatus,
    CancelAppointmentRequest,
    ConfirmAppointmentRequest,
    CreateAppointmentRequest,
    DurationMinutes,
    Provider,
    Room,
    UpdateAppointmentRequest,
)
from .client import ClientSummary

__all__ = [
    "Appointment",
    "AppointmentFilter",
    "AppointmentPage",
    "AppointmentStatus",
    "CancelAppointmentRequest",
    "ConfirmAppointmentRequest",
    "CreateAppointmentRequest",
    "DurationMinutes",
    "Provider",
    "Room",
    "UpdateAppointmentRequest",
    "ClientSummary",
]
