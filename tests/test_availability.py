"""
Unit tests for slot computation from weekly hours
"""

import pytest
from datetime import date, timedelta

from sportsbnb.domain.availability import (
    CANDIDATE_SLOTS,
    DayHours,
    available_slots,
    day_of_week,
    default_week,
    is_slot_available,
    slot_label,
    validate_week,
)

SUNDAY = date(2024, 1, 7)
MONDAY = date(2024, 1, 8)


@pytest.mark.unit
class TestAvailableSlots:
    """Bookable slots for a single day"""

    def test_day_of_week_starts_on_sunday(self):
        assert day_of_week(SUNDAY) == 0
        assert day_of_week(MONDAY) == 1
        assert day_of_week(date(2024, 1, 13)) == 6

    def test_open_day_offers_whole_hours_inside_window(self):
        slots = available_slots(MONDAY, default_week())
        assert slots[0] == "09:00"
        assert slots[-1] == "21:00"
        assert len(slots) == 13

    def test_closed_day_has_no_slots(self):
        assert available_slots(SUNDAY, default_week()) == []

    def test_blocked_date_has_no_slots(self):
        assert available_slots(MONDAY, default_week(), blocked_dates=[MONDAY]) == []

    def test_booked_slots_are_removed(self):
        slots = available_slots(MONDAY, default_week(), booked_times=["10:00", "06:00 PM"])
        assert "10:00" not in slots
        assert "18:00" not in slots
        assert "11:00" in slots

    def test_day_without_hours_is_open_for_every_slot(self):
        hours = [h for h in default_week() if h.day_of_week != 1]
        assert available_slots(MONDAY, hours) == CANDIDATE_SLOTS

    def test_midnight_close(self):
        hours = [DayHours(day_of_week=1, open_time="20:00", close_time="00:00")]
        assert available_slots(MONDAY, hours) == ["20:00", "21:00"]

    def test_slot_must_end_before_closing(self):
        hours = [DayHours(day_of_week=1, open_time="09:30", close_time="12:00")]
        assert available_slots(MONDAY, hours) == ["10:00", "11:00"]

    def test_past_dates_have_no_slots(self):
        yesterday = date.today() - timedelta(days=1)
        assert available_slots(yesterday, [], today=date.today()) == []

    def test_is_slot_available_accepts_labels(self):
        assert is_slot_available(MONDAY, "09:00 AM", default_week()) is True
        assert is_slot_available(MONDAY, "07:00", default_week()) is False

    def test_slot_label(self):
        assert slot_label("18:00") == "06:00 PM"
        assert slot_label("09:00") == "09:00 AM"


@pytest.mark.unit
class TestValidateWeek:
    """Weekly schedule validation"""

    def test_default_week_is_valid(self):
        assert validate_week(default_week()) == {}

    def test_close_before_open(self):
        errors = validate_week([DayHours(day_of_week=2, open_time="18:00", close_time="09:00")])
        assert errors == {"day_2": "Tuesday must close after it opens"}

    def test_duplicate_day(self):
        errors = validate_week([DayHours(day_of_week=3), DayHours(day_of_week=3)])
        assert "more than once" in errors["day_3"]

    def test_day_out_of_range(self):
        errors = validate_week([DayHours(day_of_week=7)])
        assert "day_7" in errors

    def test_bad_time_format(self):
        errors = validate_week([DayHours(day_of_week=1, open_time="25:99")])
        assert errors["day_1"] == "Times must use HH:MM"

    def test_closed_day_still_needs_readable_times(self):
        errors = validate_week([DayHours(day_of_week=0, open_time="nope", is_closed=True)])
        assert errors["day_0"] == "Times must use HH:MM"

    def test_closed_day_ignores_order(self):
        assert validate_week([DayHours(day_of_week=0, open_time="18:00", close_time="09:00", is_closed=True)]) == {}
