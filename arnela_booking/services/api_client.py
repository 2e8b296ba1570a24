"""
REST client for the Arnela backend.
Covers the appointment, availability and client-search endpoints used by
the booking flow.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, List, Optional

import httpx

from ..errors import ApiError, NetworkError, UnauthorizedError, parse_api_error
from ..models import (
    Appointment,
    AppointmentFilter,
    AppointmentPage,
    CancelAppointmentRequest,
    ClientSummary,
    ConfirmAppointmentRequest,
    CreateAppointmentRequest,
    Provider,
    UpdateAppointmentRequest,
)
from ..utils.helpers import format_date_for_api, parse_instant

logger = logging.getLogger(__name__)


class ArnelaApiClient:
    """
    Async HTTP client for the Arnela REST API.

    Transient failures (transport errors and 5xx responses) are retried
    with exponential backoff; every other failure is raised immediately
    as the matching ApiError subclass.
    """

    DEFAULT_BASE_URL = "http://localhost:8080/api/v1"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Backend base URL including the API prefix
            token: Bearer token of the authenticated user
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per request, including the first
            backoff_seconds: Base delay between attempts (doubles each retry)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ArnelaApiClient":
        """Build a client from application settings."""
        return cls(
            base_url=settings.api_base_url,
            token=settings.api_token,
            timeout=settings.request_timeout_seconds,
            max_attempts=settings.api_max_attempts,
            backoff_seconds=settings.api_retry_backoff_seconds,
            transport=transport,
        )

    # ==================== Transport ====================

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        """Send an authenticated request and decode the JSON response."""
        if not self.token:
            raise UnauthorizedError()

        headers = {"Authorization": f"Bearer {self.token}"}
        attempt = 0

        while True:
            attempt += 1
            try:
                response = await self._client.request(
                    method, path, params=params, json=json, headers=headers
                )
                if response.is_error:
                    raise parse_api_error(response.status_code, self._error_body(response))
                if not response.content:
                    return None
                return response.json()

            except httpx.TransportError as e:
                error: ApiError = NetworkError(str(e) or None)
            except ApiError as e:
                error = e

            if not error.retryable or attempt >= self.max_attempts:
                logger.error(f"{method} {path} failed after {attempt} attempt(s): {error}")
                raise error

            delay = self.backoff_seconds * (2 ** (attempt - 1))
            logger.warning(f"{method} {path} failed ({error}), retrying in {delay:.2f}s")
            await asyncio.sleep(delay)

    @staticmethod
    def _error_body(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    # ==================== Availability ====================

    async def get_available_slots(
        self,
        provider_id: str,
        day: date,
        duration_minutes: int,
    ) -> List[datetime]:
        """
        Get bookable start times for a provider on one day.

        Args:
            provider_id: Therapist/employee ID
            day: Calendar date
            duration_minutes: Requested duration (45 or 60)

        Returns:
            Start instants, in the order the backend returned them
        """
        data = await self._request(
            "GET",
            "/appointments/available-slots",
            params={
                "providerId": provider_id,
                "date": format_date_for_api(day),
                "duration": duration_minutes,
            },
        )
        slots = (data or {}).get("slots") or []
        return [parse_instant(s) for s in slots]

    async def list_providers(self) -> List[Provider]:
        """Get the therapists that can be booked."""
        data = await self._request("GET", "/appointments/therapists")
        return [Provider(**p) for p in (data or {}).get("therapists") or []]

    # ==================== Appointments ====================

    async def create_appointment(self, request: CreateAppointmentRequest) -> Appointment:
        """Create a new appointment."""
        data = await self._request("POST", "/appointments", json=request.to_payload())
        created = Appointment(**data)
        logger.info(f"Created appointment {created.id} starting {created.start_time.isoformat()}")
        return created

    async def get_appointment(self, appointment_id: str) -> Appointment:
        """Get a specific appointment by ID."""
        data = await self._request("GET", f"/appointments/{appointment_id}")
        return Appointment(**data)

    async def update_appointment(
        self,
        appointment_id: str,
        request: UpdateAppointmentRequest,
    ) -> Appointment:
        """Reschedule or edit an appointment."""
        data = await self._request(
            "PUT", f"/appointments/{appointment_id}", json=request.to_payload()
        )
        return Appointment(**data)

    async def confirm_appointment(self, appointment_id: str, notes: Optional[str] = None) -> Appointment:
        """Confirm a pending appointment."""
        body = ConfirmAppointmentRequest(notes=notes or None)
        data = await self._request(
            "POST", f"/appointments/{appointment_id}/confirm", json=body.to_payload()
        )
        return Appointment(**data)

    async def cancel_appointment(self, appointment_id: str, reason: str) -> str:
        """Cancel an appointment. Returns the backend's confirmation message."""
        body = CancelAppointmentRequest(reason=reason)
        data = await self._request(
            "POST", f"/appointments/{appointment_id}/cancel", json=body.to_payload()
        )
        return (data or {}).get("message", "")

    async def get_my_appointments(self, page: int = 1, page_size: int = 10) -> AppointmentPage:
        """Get the authenticated client's appointments."""
        data = await self._request(
            "GET", "/appointments/me", params={"page": page, "pageSize": page_size}
        )
        return AppointmentPage(**(data or {}))

    async def list_appointments(self, filters: Optional[AppointmentFilter] = None) -> AppointmentPage:
        """List appointments (backoffice)."""
        params = (filters or AppointmentFilter()).to_payload()
        data = await self._request("GET", "/appointments", params=params)
        return AppointmentPage(**(data or {}))

    # ==================== Clients ====================

    async def search_clients(self, query: str) -> List[ClientSummary]:
        """Search active clients by name, DNI or email."""
        data = await self._request(
            "GET", "/clients", params={"search": query, "isActive": "true"}
        )
        if isinstance(data, dict):
            data = data.get("clients") or []
        return [ClientSummary(**c) for c in data or []]

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
