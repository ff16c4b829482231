"""
Bookable slot computation from weekly hours and blocked dates
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional, Protocol

DAYS_OF_WEEK = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

# Hourly start times offered to players
CANDIDATE_SLOTS = [f"{hour:02d}:00" for hour in range(6, 22)]

SLOT_MINUTES = 60
MINUTES_PER_DAY = 24 * 60


class HoursLike(Protocol):
    day_of_week: int
    open_time: str
    close_time: str
    is_closed: bool


@dataclass
class DayHours:
    day_of_week: int
    open_time: str = "09:00"
    close_time: str = "22:00"
    is_closed: bool = False


def day_of_week(on: date) -> int:
    """Weekday index with Sunday as 0"""
    return (on.weekday() + 1) % 7


def parse_time(value: str) -> time:
    """Accept ``HH:MM`` (24h) or ``HH:MM AM`` labels"""
    value = value.strip()
    for fmt in ("%H:%M", "%I:%M %p", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time: {value!r}")


def normalize_time(value: str) -> str:
    return parse_time(value).strftime("%H:%M")


def slot_label(value: str) -> str:
    """``"18:00"`` -> ``"06:00 PM"``"""
    return parse_time(value).strftime("%I:%M %p")


def _minutes(value: str) -> int:
    parsed = parse_time(value)
    return parsed.hour * 60 + parsed.minute


def _closing_minutes(close_time: str) -> int:
    # "00:00" as a closing time means midnight
    close = _minutes(close_time)
    return MINUTES_PER_DAY if close == 0 else close


def default_week() -> List[DayHours]:
    """Seven open days, 09:00-22:00, Sunday closed"""
    return [DayHours(day_of_week=day, is_closed=(day == 0)) for day in range(7)]


def hours_for(on: date, hours: Iterable[HoursLike]) -> Optional[HoursLike]:
    weekday = day_of_week(on)
    return next((h for h in hours if h.day_of_week == weekday), None)


def available_slots(
    on: date,
    hours: Iterable[HoursLike],
    blocked_dates: Iterable[date] = (),
    booked_times: Iterable[str] = (),
    today: Optional[date] = None,
) -> List[str]:
    """
    Candidate slots a player can book on ``on``.

    A blocked date or a weekday marked closed yields nothing. Otherwise a
    slot is offered when its whole hour falls inside the day's open/close
    window and nobody holds it yet. Weekdays with no configured hours are
    treated as open for every candidate slot.
    """
    if today is not None and on < today:
        return []
    if on in set(blocked_dates):
        return []

    day = hours_for(on, hours)
    if day is not None and day.is_closed:
        return []

    taken = {normalize_time(t) for t in booked_times}
    if day is None:
        return [slot for slot in CANDIDATE_SLOTS if slot not in taken]

    opens = _minutes(day.open_time)
    closes = _closing_minutes(day.close_time)
    return [
        slot for slot in CANDIDATE_SLOTS
        if opens <= _minutes(slot) and _minutes(slot) + SLOT_MINUTES <= closes
        and slot not in taken
    ]


def is_slot_available(
    on: date,
    slot: str,
    hours: Iterable[HoursLike],
    blocked_dates: Iterable[date] = (),
    booked_times: Iterable[str] = (),
    today: Optional[date] = None,
) -> bool:
    return normalize_time(slot) in available_slots(on, hours, blocked_dates, booked_times, today)


def validate_week(hours: Iterable[HoursLike]) -> Dict[str, str]:
    """Field errors for a weekly schedule; keys are ``day_<n>``"""
    errors: Dict[str, str] = {}
    seen = set()
    for h in hours:
        key = f"day_{h.day_of_week}"
        if not 0 <= h.day_of_week <= 6:
            errors[key] = "Day of week must be between 0 (Sunday) and 6 (Saturday)"
            continue
        if h.day_of_week in seen:
            errors[key] = f"{DAYS_OF_WEEK[h.day_of_week]} is listed more than once"
            continue
        seen.add(h.day_of_week)
        try:
            opens, closes = _minutes(h.open_time), _minutes(h.close_time)
        except ValueError:
            errors[key] = "Times must use HH:MM"
            continue
        if h.is_closed:
            continue
        if closes != 0 and closes <= opens:
            errors[key] = f"{DAYS_OF_WEEK[h.day_of_week]} must close after it opens"
    return errors
