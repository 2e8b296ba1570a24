"""Status-changing appointment actions (confirm, cancel) and list loading."""

import logging
from datetime import datetime
from typing import Optional

from ..errors import ApiError, BookingValidationError
from ..models import Appointment, AppointmentFilter, AppointmentPage, AppointmentStatus
from ..services.notifier import Notifier
from ..services.optimistic import OptimisticUpdater
from ..services.store import AppointmentStore
from .status import can_cancel, can_confirm, validate_cancellation_reason

logger = logging.getLogger(__name__)


class AppointmentActions:
    """
    Confirm and cancel appointments held in an AppointmentStore.

    Both actions apply the new status to the store immediately and roll
    back only the fields they changed if the backend rejects the call.
    """

    def __init__(
        self,
        api,
        store: AppointmentStore,
        notifier: Notifier,
        updater: Optional[OptimisticUpdater] = None,
    ):
        """
        Initialize appointment actions.

        Args:
            api: Backend client (ArnelaApiClient or a compatible fake)
            store: Store holding the appointment list and selection
            notifier: Sink for user notifications
            updater: Optimistic updater (one is created if omitted)
        """
        self._api = api
        self.store = store
        self.notifier = notifier
        self.updater = updater or OptimisticUpdater(notifier)

    @property
    def is_loading(self) -> bool:
        return self.updater.is_loading

    async def refresh(self, appointment_id: str) -> Optional[Appointment]:
        """Reload one appointment and make it the selected item."""
        try:
            appointment = await self._api.get_appointment(appointment_id)
        except ApiError as e:
            logger.error(f"Error fetching appointment {appointment_id}: {e}")
            self.notifier.error("Error al cargar la cita", e.user_message)
            return None

        self.store.replace_appointment(appointment)
        self.store.set_selected(appointment)
        return appointment

    async def confirm(self, appointment_id: str, notes: Optional[str] = None) -> Optional[Appointment]:
        """
        Confirm a pending appointment optimistically.

        Args:
            appointment_id: Appointment to confirm
            notes: Optional free-text note stored by the backend

        Returns:
            The server's updated appointment, or None on failure
        """
        appointment = self.store.get(appointment_id)
        if appointment is None:
            self.notifier.error("Cita no encontrada")
            return None
        if not can_confirm(appointment):
            self.notifier.error(
                "Solo se pueden confirmar citas pendientes",
                f"Estado actual: {appointment.status.value}",
            )
            return None

        notes = (notes or "").strip() or None
        updates = {"status": AppointmentStatus.CONFIRMED}
        if notes:
            updates["notes"] = notes

        return await self.updater.execute(
            optimistic_fn=lambda: self.store.update_appointment(appointment_id, updates),
            async_fn=lambda: self._api.confirm_appointment(appointment_id, notes),
            rollback_fn=lambda previous: self.store.update_appointment(appointment_id, previous),
            previous=self.store.snapshot_fields(appointment_id, updates),
            on_success=self.store.replace_appointment,
            success_message="Cita confirmada exitosamente",
            error_message="Error al confirmar la cita. Por favor inténtalo nuevamente.",
        )

    async def cancel(
        self,
        appointment_id: str,
        reason: str,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Cancel an upcoming appointment optimistically.

        An empty reason is rejected before anything reaches the backend.

        Args:
            appointment_id: Appointment to cancel
            reason: Why the appointment is cancelled (required)
            now: Reference instant for the upcoming check (defaults to now)

        Returns:
            True if the backend accepted the cancellation
        """
        try:
            reason = validate_cancellation_reason(reason)
        except BookingValidationError as e:
            self.notifier.error("Motivo requerido", str(e))
            return False

        appointment = self.store.get(appointment_id)
        if appointment is None:
            self.notifier.error("Cita no encontrada")
            return False
        if not can_cancel(appointment, now):
            self.notifier.error("Esta cita ya no se puede cancelar")
            return False

        updates = {
            "status": AppointmentStatus.CANCELLED,
            "cancellation_reason": reason,
        }

        message = await self.updater.execute(
            optimistic_fn=lambda: self.store.update_appointment(appointment_id, updates),
            async_fn=lambda: self._api.cancel_appointment(appointment_id, reason),
            rollback_fn=lambda previous: self.store.update_appointment(appointment_id, previous),
            previous=self.store.snapshot_fields(appointment_id, updates),
            success_message="Cita cancelada",
            error_message="Error al cancelar la cita",
        )
        return message is not None

    async def load_my_appointments(self, page: int = 1, page_size: int = 10) -> Optional[AppointmentPage]:
        """Load the signed-in client's appointments into the store."""
        try:
            result = await self._api.get_my_appointments(page, page_size)
        except ApiError as e:
            logger.error(f"Error loading appointments: {e}")
            self.notifier.error("Error al cargar las citas", e.user_message)
            return None
        return self._apply_page(result)

    async def load_appointments(self, filters: Optional[AppointmentFilter] = None) -> Optional[AppointmentPage]:
        """Load a filtered backoffice appointment page into the store."""
        try:
            result = await self._api.list_appointments(filters)
        except ApiError as e:
            logger.error(f"Error loading appointments: {e}")
            self.notifier.error("Error al cargar las citas", e.user_message)
            return None
        return self._apply_page(result)

    def _apply_page(self, result: AppointmentPage) -> AppointmentPage:
        self.store.set_appointments(result.appointments)
        self.store.set_pagination(page=result.page, page_size=result.page_size, total=result.total)
        return result
