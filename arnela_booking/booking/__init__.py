"""Booking flow: wizard, date policy, status rules and appointment actions."""

from .actions import AppointmentActions
from .calendar import BookingCalendar
from .search import ClientSearch
from .status import can_cancel, can_confirm, can_transition, status_label
from .wizard import BookingDraft, BookingWizard, WizardEvent, WizardStep, WizardVariant

__all__ = [
    "AppointmentActions",
    "BookingCalendar",
    "ClientSearch",
    "can_cancel",
    "can_confirm",
    "can_transition",
    "status_label",
    "BookingDraft",
    "BookingWizard",
    "WizardEvent",
    "WizardStep",
    "WizardVariant",
]
