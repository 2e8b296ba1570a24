"""Helper utility functions."""

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Union
from dateutil import parser as date_parser

from ..models import Appointment


def utcnow() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_instant(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 instant returned by the backend.

    Args:
        value: ISO string (e.g. "2025-11-24T10:00:00Z") or datetime

    Returns:
        Timezone-aware datetime (naive input is taken as UTC)
    """
    dt = value if isinstance(value, datetime) else date_parser.isoparse(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_date_for_api(day: Union[date, datetime]) -> str:
    """Format a calendar date as YYYY-MM-DD for API requests."""
    if isinstance(day, datetime):
        day = day.date()
    return day.strftime("%Y-%m-%d")


def format_slot_time(slot: datetime, tz=None) -> str:
    """Format a slot as HH:MM (24-hour), optionally in a display timezone."""
    if tz is not None:
        slot = slot.astimezone(tz)
    return slot.strftime("%H:%M")


def format_duration(minutes: int) -> str:
    """
    Format a duration for display.

    Examples:
        45 -> "45 min", 60 -> "1h", 90 -> "1h 30min"
    """
    if minutes < 60:
        return f"{minutes} min"

    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h {remaining}min"


def relative_date_label(day: date, today: Optional[date] = None) -> str:
    """Get "Hoy", "Mañana" or the ISO date."""
    today = today or utcnow().date()
    delta = (day - today).days
    if delta == 0:
        return "Hoy"
    if delta == 1:
        return "Mañana"
    return format_date_for_api(day)


def group_appointments_by_date(appointments: Iterable[Appointment]) -> Dict[str, List[Appointment]]:
    """Group appointments by their start date (YYYY-MM-DD), keeping order."""
    groups: Dict[str, List[Appointment]] = defaultdict(list)
    for appointment in appointments:
        groups[format_date_for_api(appointment.start_time)].append(appointment)
    return dict(groups)
