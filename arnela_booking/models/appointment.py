"""Appointment data models."""

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

DurationMinutes = Literal[45, 60]


class AppointmentStatus(str, Enum):
    """Possible appointment statuses."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    RESCHEDULED = "rescheduled"


class Room(str, Enum):
    """Consulting rooms a backoffice booking can be assigned to."""
    GABINETE_01 = "gabinete_01"
    GABINETE_02 = "gabinete_02"
    GABINETE_EXTERNO = "gabinete_externo"


class ApiModel(BaseModel):
    """Base model speaking the backend's camelCase JSON."""

    def to_payload(self) -> dict:
        """Serialize for a request body, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Provider(ApiModel):
    """A therapist or employee who owns appointments."""
    id: str = Field(..., description="Provider ID")
    name: str = Field(default="", description="Display name")
    specialties: List[str] = Field(default_factory=list)
    is_available: bool = Field(default=True)
    avatar_color: Optional[str] = Field(default=None)


class Appointment(ApiModel):
    """Represents a booked appointment."""
    id: Optional[str] = Field(default=None, description="Unique appointment ID")
    client_id: Optional[str] = Field(default=None, description="Client the appointment belongs to")
    provider_id: str = Field(..., description="Therapist/employee owning the appointment")
    title: str = Field(..., description="Appointment title")
    description: Optional[str] = Field(default=None)
    start_time: datetime = Field(..., description="Start instant (timezone-aware)")
    duration_minutes: DurationMinutes = Field(default=60, description="Duration in minutes")
    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING)
    room: Optional[Room] = Field(default=None)
    notes: Optional[str] = Field(default=None, description="Notes added on confirmation")
    cancellation_reason: Optional[str] = Field(default=None)
    created_by: Optional[str] = Field(default=None)
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)

    @property
    def end_time(self) -> datetime:
        """End instant, always derived from start and duration."""
        return self.start_time + timedelta(minutes=self.duration_minutes)


class CreateAppointmentRequest(ApiModel):
    """Body for POST /appointments."""
    client_id: Optional[str] = Field(
        default=None,
        description="Omitted when the authenticated caller books for themselves"
    )
    provider_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    duration_minutes: DurationMinutes = 60
    room: Optional[Room] = None


class UpdateAppointmentRequest(ApiModel):
    """Body for PUT /appointments/{id} (reschedule)."""
    provider_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    duration_minutes: Optional[DurationMinutes] = None


class ConfirmAppointmentRequest(ApiModel):
    """Body for POST /appointments/{id}/confirm."""
    notes: Optional[str] = None


class CancelAppointmentRequest(ApiModel):
    """Body for POST /appointments/{id}/cancel."""
    reason: str


class AppointmentFilter(ApiModel):
    """Query filters for the backoffice appointment list."""
    client_id: Optional[str] = None
    provider_id: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    start_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    end_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    page: int = 1
    page_size: int = 10


class AppointmentPage(ApiModel):
    """One page of appointments."""
    appointments: List[Appointment] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10

    @field_validator("appointments", mode="before")
    @classmethod
    def _null_as_empty(cls, v):
        return v or []
