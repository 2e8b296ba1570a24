"""Services package for backend access and shared client state."""

from .api_client import ArnelaApiClient
from .notifier import LogNotifier, Notifier
from .optimistic import OptimisticUpdater
from .store import AppointmentStore

__all__ = [
    "ArnelaApiClient",
    "LogNotifier",
    "Notifier",
    "OptimisticUpdater",
    "AppointmentStore",
]
