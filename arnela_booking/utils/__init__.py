"""Utility functions package."""

from .helpers import (
    format_date_for_api,
    format_duration,
    group_appointments_by_date,
    parse_instant,
    utcnow,
)

__all__ = [
    "format_date_for_api",
    "format_duration",
    "group_appointments_by_date",
    "parse_instant",
    "utcnow",
]
