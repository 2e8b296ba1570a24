"""
Shared pytest fixtures for the booking client tests.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from arnela_booking.models import Appointment, ClientSummary, Provider
from arnela_booking.services.notifier import LogNotifier
from arnela_booking.services.store import AppointmentStore

# Thursday morning, a few days before the booking date used across tests.
FIXED_NOW = datetime(2025, 11, 20, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock returning the fixed test instant."""
    return lambda: FIXED_NOW


@pytest.fixture
def notifier():
    return LogNotifier()


@pytest.fixture
def store():
    return AppointmentStore()


@pytest.fixture
def make_appointment():
    """Factory for appointments with sensible defaults."""

    def _make(**overrides) -> Appointment:
        data = {
            "id": "a1",
            "client_id": "c1",
            "provider_id": "p1",
            "title": "Consulta Inicial",
            "start_time": datetime(2025, 11, 24, 10, 0, tzinfo=timezone.utc),
            "duration_minutes": 60,
            "status": "pending",
        }
        data.update(overrides)
        return Appointment(**data)

    return _make


@pytest.fixture
def client_ana():
    return ClientSummary(
        id="c1",
        first_name="Ana",
        last_name="García",
        email="ana@example.com",
        dni="12345678Z",
    )


@pytest.fixture
def api(client_ana):
    """Fake backend client with async methods."""
    fake = MagicMock()
    fake.list_providers = AsyncMock(return_value=[
        Provider(id="p1", name="Laura Martín", specialties=["Psicología"]),
        Provider(id="p2", name="Marcos Ruiz", specialties=["Fisioterapia"]),
    ])
    fake.get_available_slots = AsyncMock(return_value=[])
    fake.search_clients = AsyncMock(return_value=[client_ana])
    fake.create_appointment = AsyncMock()
    fake.get_appointment = AsyncMock()
    fake.confirm_appointment = AsyncMock()
    fake.cancel_appointment = AsyncMock(return_value="Appointment cancelled successfully")
    fake.get_my_appointments = AsyncMock()
    fake.list_appointments = AsyncMock()
    return fake
