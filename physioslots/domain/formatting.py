"""
Locale-aware date and time formatting shared by every caller.
"""

from pendulum import DateTime

from .models import AvailableSlot

DEFAULT_LOCALE = "en"

DATE_FORMAT = "MMMM D, YYYY"
TIME_FORMAT = "h:mm A"
DATETIME_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"
MONTH_FORMAT = "MMMM YYYY"


def format_date(dt: DateTime, locale: str = DEFAULT_LOCALE) -> str:
    """Format a date, e.g. ``January 15, 2024``."""
    return dt.format(DATE_FORMAT, locale=locale)


def format_time(dt: DateTime, locale: str = DEFAULT_LOCALE) -> str:
    """Format a clock time, e.g. ``9:00 AM``."""
    return dt.format(TIME_FORMAT, locale=locale)


def format_datetime(dt: DateTime, locale: str = DEFAULT_LOCALE) -> str:
    return dt.format(DATETIME_FORMAT, locale=locale)


def format_month(dt: DateTime, locale: str = DEFAULT_LOCALE) -> str:
    return dt.format(MONTH_FORMAT, locale=locale)


def format_slot(slot: AvailableSlot, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a slot for display.
    Format: Weekday, Month D, YYYY | h:mm A – h:mm A (N min)
    """
    weekday = slot.start.format("dddd", locale=locale)
    return (
        f"{weekday}, {format_date(slot.start, locale)} | "
        f"{format_time(slot.start, locale)} – {format_time(slot.end, locale)} "
        f"({slot.duration_minutes} min)"
    )
