"""In-memory appointment state shared by the booking components."""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..models import Appointment

logger = logging.getLogger(__name__)

Listener = Callable[["AppointmentStore"], None]


@dataclass(frozen=True)
class Pagination:
    """Paging state of the appointment list."""
    page: int = 1
    page_size: int = 10
    total: int = 0


class AppointmentStore:
    """
    Single-writer container for the appointment list and selection.

    Every mutation goes through one of the setters below, which notify
    subscribers afterwards. Readers get the current values through the
    `appointments`, `selected` and `pagination` attributes.
    """

    def __init__(self, appointments: Optional[Iterable[Appointment]] = None):
        self.appointments: List[Appointment] = list(appointments or [])
        self.selected: Optional[Appointment] = None
        self.pagination = Pagination(total=len(self.appointments))
        self._listeners: List[Listener] = []

    # ==================== Subscriptions ====================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ==================== Reads ====================

    def get(self, appointment_id: str) -> Optional[Appointment]:
        """Find an appointment by id in the list or the selection."""
        for appointment in self.appointments:
            if appointment.id == appointment_id:
                return appointment
        if self.selected is not None and self.selected.id == appointment_id:
            return self.selected
        return None

    def snapshot_fields(self, appointment_id: str, fields: Iterable[str]) -> Dict[str, Any]:
        """Current values of the given fields of one appointment."""
        appointment = self.get(appointment_id)
        if appointment is None:
            return {}
        return {name: getattr(appointment, name) for name in fields}

    # ==================== Writes ====================

    def set_appointments(self, appointments: Iterable[Appointment]) -> None:
        self.appointments = list(appointments)
        self._notify()

    def set_selected(self, appointment: Optional[Appointment]) -> None:
        self.selected = appointment
        self._notify()

    def set_pagination(self, **changes: int) -> None:
        """Update some of page, page_size and total."""
        self.pagination = replace(self.pagination, **changes)
        self._notify()

    def add_appointment(self, appointment: Appointment) -> None:
        self.appointments = [*self.appointments, appointment]
        self.pagination = replace(self.pagination, total=self.pagination.total + 1)
        self._notify()

    def update_appointment(self, appointment_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply field updates to one appointment, in the list and the selection.

        Args:
            appointment_id: Appointment to update
            updates: Field name -> new value

        Returns:
            Field name -> previous value, for exactly the fields in `updates`.
            Applying the returned dict undoes this call without touching
            other fields.
        """
        previous = self.snapshot_fields(appointment_id, updates)
        if not previous:
            logger.debug(f"Appointment {appointment_id} not in store, nothing to update")
            return {}

        self.appointments = [
            apt.model_copy(update=updates) if apt.id == appointment_id else apt
            for apt in self.appointments
        ]
        if self.selected is not None and self.selected.id == appointment_id:
            self.selected = self.selected.model_copy(update=updates)

        self._notify()
        return previous

    def replace_appointment(self, appointment: Appointment) -> None:
        """Swap in the server's copy of an appointment."""
        self.appointments = [
            appointment if apt.id == appointment.id else apt
            for apt in self.appointments
        ]
        if self.selected is not None and self.selected.id == appointment.id:
            self.selected = appointment
        self._notify()

    def remove_appointment(self, appointment_id: str) -> None:
        remaining = [apt for apt in self.appointments if apt.id != appointment_id]
        removed = len(self.appointments) - len(remaining)
        self.appointments = remaining
        if removed:
            self.pagination = replace(self.pagination, total=max(0, self.pagination.total - removed))
        if self.selected is not None and self.selected.id == appointment_id:
            self.selected = None
        self._notify()

    def clear(self) -> None:
        self.appointments = []
        self.selected = None
        self.pagination = Pagination()
        self._notify()
