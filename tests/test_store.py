"""
Tests for the appointment store.
"""

from arnela_booking.models import AppointmentStatus
from arnela_booking.services.store import AppointmentStore, Pagination


class TestAppointmentStore:
    """Test store writes and subscriptions"""

    def test_update_returns_previous_values_of_touched_fields(self, make_appointment):
        store = AppointmentStore([make_appointment(notes="antes")])

        previous = store.update_appointment("a1", {"status": AppointmentStatus.CONFIRMED})

        assert previous == {"status": AppointmentStatus.PENDING}
        assert store.get("a1").status == AppointmentStatus.CONFIRMED
        assert store.get("a1").notes == "antes"

    def test_update_applies_to_selected_item(self, make_appointment):
        appointment = make_appointment()
        store = AppointmentStore([appointment])
        store.set_selected(appointment)

        store.update_appointment("a1", {"status": AppointmentStatus.CONFIRMED})

        assert store.selected.status == AppointmentStatus.CONFIRMED

    def test_scoped_rollback_keeps_unrelated_changes(self, make_appointment):
        store = AppointmentStore([make_appointment()])

        previous = store.update_appointment("a1", {"status": AppointmentStatus.CONFIRMED})
        store.update_appointment("a1", {"title": "Renombrada"})
        store.update_appointment("a1", previous)

        restored = store.get("a1")
        assert restored.status == AppointmentStatus.PENDING
        assert restored.title == "Renombrada"

    def test_update_unknown_appointment_is_noop(self, make_appointment):
        store = AppointmentStore([make_appointment()])
        assert store.update_appointment("missing", {"title": "x"}) == {}

    def test_add_and_remove_track_total(self, make_appointment):
        store = AppointmentStore()
        store.add_appointment(make_appointment(id="a1"))
        store.add_appointment(make_appointment(id="a2"))
        assert store.pagination.total == 2

        store.remove_appointment("a1")
        assert [a.id for a in store.appointments] == ["a2"]
        assert store.pagination.total == 1

    def test_replace_swaps_server_copy(self, make_appointment):
        store = AppointmentStore([make_appointment()])
        store.replace_appointment(make_appointment(status="confirmed", notes="ok"))
        assert store.get("a1").notes == "ok"

    def test_subscribers_notified_until_unsubscribed(self, make_appointment):
        store = AppointmentStore()
        seen = []
        unsubscribe = store.subscribe(lambda s: seen.append(len(s.appointments)))

        store.add_appointment(make_appointment())
        unsubscribe()
        store.clear()

        assert seen == [1]
        assert store.pagination == Pagination()

    def test_set_pagination_merges(self):
        store = AppointmentStore()
        store.set_pagination(page=3)
        assert store.pagination == Pagination(page=3, page_size=10, total=0)
