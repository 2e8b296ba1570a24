"""
Tests for confirm/cancel actions against the appointment store.
"""

from datetime import timedelta

import pytest

from arnela_booking.booking.actions import AppointmentActions
from arnela_booking.errors import NetworkError, NotFoundError
from arnela_booking.models import AppointmentPage, AppointmentStatus
from arnela_booking.services.notifier import NotificationKind


@pytest.fixture
def actions(api, store, notifier):
    return AppointmentActions(api=api, store=store, notifier=notifier)


class TestConfirm:
    """Optimistic confirmation"""

    @pytest.mark.asyncio
    async def test_confirm_success_uses_server_copy(self, actions, api, store, notifier, make_appointment):
        pending = make_appointment()
        store.set_appointments([pending])
        store.set_selected(pending)
        server_copy = make_appointment(status="confirmed", notes="Traer informe")
        api.confirm_appointment.return_value = server_copy

        result = await actions.confirm("a1", notes="  Traer informe ")

        assert result == server_copy
        api.confirm_appointment.assert_awaited_once_with("a1", "Traer informe")
        assert store.get("a1").status == AppointmentStatus.CONFIRMED
        assert store.selected.notes == "Traer informe"
        assert len(notifier.of_kind(NotificationKind.SUCCESS)) == 1

    @pytest.mark.asyncio
    async def test_status_is_confirmed_while_request_in_flight(self, actions, api, store, make_appointment):
        store.set_appointments([make_appointment()])
        seen = []

        async def confirm(appointment_id, notes):
            seen.append(store.get(appointment_id).status)
            return make_appointment(status="confirmed")

        api.confirm_appointment.side_effect = confirm
        await actions.confirm("a1")

        assert seen == [AppointmentStatus.CONFIRMED]

    @pytest.mark.asyncio
    async def test_confirm_failure_rolls_back_to_pending(self, actions, api, store, notifier, make_appointment):
        pending = make_appointment()
        store.set_appointments([pending])
        store.set_selected(pending)
        api.confirm_appointment.side_effect = NetworkError()

        result = await actions.confirm("a1", notes="nota")

        assert result is None
        assert store.get("a1").status == AppointmentStatus.PENDING
        assert store.get("a1").notes is None
        assert store.selected.status == AppointmentStatus.PENDING
        assert len(notifier.of_kind(NotificationKind.ERROR)) == 1

    @pytest.mark.asyncio
    async def test_confirm_rejected_for_non_pending(self, actions, api, store, notifier, make_appointment):
        store.set_appointments([make_appointment(status="confirmed")])

        assert await actions.confirm("a1") is None
        api.confirm_appointment.assert_not_awaited()
        assert len(notifier.of_kind(NotificationKind.ERROR)) == 1


class TestCancel:
    """Optimistic cancellation"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["", "   "])
    async def test_empty_reason_never_reaches_network(self, actions, api, store, notifier, make_appointment, now, reason):
        store.set_appointments([make_appointment()])

        assert await actions.cancel("a1", reason, now=now) is False

        api.cancel_appointment.assert_not_awaited()
        errors = notifier.of_kind(NotificationKind.ERROR)
        assert len(errors) == 1
        assert errors[0].message == "Motivo requerido"
        assert store.get("a1").status == AppointmentStatus.PENDING

    @pytest.mark.asyncio
    async def test_cancel_success(self, actions, api, store, make_appointment, now):
        store.set_appointments([make_appointment(status="confirmed")])

        assert await actions.cancel("a1", " Enfermedad ", now=now) is True

        api.cancel_appointment.assert_awaited_once_with("a1", "Enfermedad")
        cancelled = store.get("a1")
        assert cancelled.status == AppointmentStatus.CANCELLED
        assert cancelled.cancellation_reason == "Enfermedad"

    @pytest.mark.asyncio
    async def test_cancel_failure_restores_status_and_reason(self, actions, api, store, make_appointment, now):
        store.set_appointments([make_appointment(status="rescheduled")])
        api.cancel_appointment.side_effect = NetworkError()

        assert await actions.cancel("a1", "Viaje", now=now) is False

        restored = store.get("a1")
        assert restored.status == AppointmentStatus.RESCHEDULED
        assert restored.cancellation_reason is None

    @pytest.mark.asyncio
    async def test_past_appointment_not_cancelled(self, actions, api, store, make_appointment, now):
        store.set_appointments([make_appointment(start_time=now - timedelta(days=1))])

        assert await actions.cancel("a1", "Viaje", now=now) is False
        api.cancel_appointment.assert_not_awaited()


class TestLoading:
    """Refresh and list loading"""

    @pytest.mark.asyncio
    async def test_refresh_replaces_and_selects(self, actions, api, store, make_appointment):
        store.set_appointments([make_appointment()])
        api.get_appointment.return_value = make_appointment(title="Actualizada")

        refreshed = await actions.refresh("a1")

        assert refreshed.title == "Actualizada"
        assert store.get("a1").title == "Actualizada"
        assert store.selected.id == "a1"

    @pytest.mark.asyncio
    async def test_refresh_not_found(self, actions, api, store, notifier):
        api.get_appointment.side_effect = NotFoundError()

        assert await actions.refresh("zz") is None
        assert store.selected is None
        assert len(notifier.of_kind(NotificationKind.ERROR)) == 1

    @pytest.mark.asyncio
    async def test_load_my_appointments_fills_store(self, actions, api, store, make_appointment):
        api.get_my_appointments.return_value = AppointmentPage(
            appointments=[make_appointment(id="a1"), make_appointment(id="a2")],
            total=12,
            page=2,
            page_size=2,
        )

        page = await actions.load_my_appointments(page=2, page_size=2)

        api.get_my_appointments.assert_awaited_once_with(2, 2)
        assert page.total == 12
        assert [a.id for a in store.appointments] == ["a1", "a2"]
        assert (store.pagination.page, store.pagination.page_size, store.pagination.total) == (2, 2, 12)

    @pytest.mark.asyncio
    async def test_load_appointments_failure_keeps_store(self, actions, api, store, make_appointment):
        store.set_appointments([make_appointment()])
        api.list_appointments.side_effect = NetworkError()

        assert await actions.load_appointments() is None
        assert len(store.appointments) == 1
