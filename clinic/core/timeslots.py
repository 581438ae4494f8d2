"""
Helpers for the 12-hour slot strings used in doctor availability templates,
e.g. ``"09:00 AM"``.
"""
from datetime import date, datetime, time
from enum import Enum

from .exceptions import InvalidArgument

SLOT_FORMAT = "%I:%M %p"


class TimeOfDay(str, Enum):
    AM = "AM"
    PM = "PM"


def parse_slot(value: str) -> time:
    """Parse a slot string, raising ``InvalidArgument`` when it is not ``HH:MM AM|PM``."""
    try:
        return datetime.strptime(value.strip(), SLOT_FORMAT).time()
    except (AttributeError, ValueError):
        raise InvalidArgument(f"Invalid time slot: {value!r}")


def normalize_slot(value: str) -> str:
    """Canonical spelling of a slot, so "9:00 am" and "09:00 AM" compare equal."""
    return parse_slot(value).strftime(SLOT_FORMAT)


def time_of_day(value: str) -> TimeOfDay:
    return TimeOfDay.AM if parse_slot(value).hour < 12 else TimeOfDay.PM


def parse_date(value: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid date: {value!r}")


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def weekday_name(on: date) -> str:
    return WEEKDAYS[on.weekday()]


def slot_sort_key(value: str):
    """Chronological key for slot strings; unparseable values sort last."""
    try:
        return (0, parse_slot(value))
    except InvalidArgument:
        return (1, value)
