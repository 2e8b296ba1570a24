"""Date policy for bookable calendar days."""

from datetime import date, timedelta
from typing import Iterator, List, Optional, Tuple
from dateutil.relativedelta import relativedelta

WEEKDAYS = [0, 1, 2, 3, 4]  # Mon-Fri (0=Monday)


class BookingCalendar:
    """Decides which calendar days may be picked in the booking wizard."""

    def __init__(
        self,
        booking_weekdays: Optional[List[int]] = None,
        horizon_months: int = 6,
    ):
        """
        Initialize the booking calendar.

        Args:
            booking_weekdays: Weekday numbers open for booking (0=Monday), default Mon-Fri
            horizon_months: How many months ahead of today may be booked
        """
        self.booking_weekdays = booking_weekdays if booking_weekdays is not None else WEEKDAYS
        self.horizon_months = horizon_months

    def last_bookable_day(self, today: date) -> date:
        """Last day inside the booking window."""
        return today + relativedelta(months=self.horizon_months)

    def validate_date(self, day: date, today: date) -> Tuple[bool, str]:
        """
        Validate if a date can be selected for booking.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if day.weekday() not in self.booking_weekdays:
            return False, "Solo se pueden reservar citas de lunes a viernes."

        if day < today:
            return False, "La fecha seleccionada ya ha pasado."

        if day > self.last_bookable_day(today):
            return False, f"Solo se puede reservar con {self.horizon_months} meses de antelación."

        return True, ""

    def is_selectable(self, day: date, today: date) -> bool:
        """Pure predicate over a calendar date."""
        return self.validate_date(day, today)[0]

    def selectable_days(self, today: date) -> Iterator[date]:
        """Iterate every selectable day from today through the horizon."""
        last = self.last_bookable_day(today)
        current = today
        while current <= last:
            if current.weekday() in self.booking_weekdays:
                yield current
            current += timedelta(days=1)
