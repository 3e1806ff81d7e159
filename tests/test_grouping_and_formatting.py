"""
Tests for slot grouping and display formatting.
"""

import pendulum

from physioslots.domain.formatting import (
    format_date,
    format_datetime,
    format_month,
    format_slot,
    format_time,
)
from physioslots.domain.grouping import dates_with_slots, group_by_day, slots_on, split_by_period
from physioslots.domain.models import SlotRequest, WorkingHours
from physioslots.domain.slot_engine import SlotEngine

TZ = "America/New_York"


def _at(value: str):
    return pendulum.parse(value, tz=TZ)


def _slots(start="2024-01-15 00:00", end="2024-01-15 23:59", duration=60):
    engine = SlotEngine(WorkingHours(timezone=TZ))
    return engine.find_available_slots(SlotRequest(_at(start), _at(end), duration))


class TestGrouping:
    """Tests for morning/afternoon and per-day grouping."""

    def test_split_at_noon(self):
        periods = split_by_period(_slots())

        assert [s.start.hour for s in periods.morning] == [9, 10, 11]
        assert [s.start.hour for s in periods.afternoon] == [12, 13, 14, 15, 16]
        assert len(periods) == 8

    def test_slot_starting_before_noon_is_morning_even_if_it_ends_after(self):
        periods = split_by_period(_slots(duration=90))

        # 10:30-12:00 and 12:00-13:30 sit on either side of the cutoff
        assert [s.start.format("HH:mm") for s in periods.morning] == ["09:00", "10:30"]
        assert periods.afternoon[0].start.format("HH:mm") == "12:00"

    def test_custom_cutoff(self):
        periods = split_by_period(_slots(), cutoff_hour=10)

        assert [s.start.hour for s in periods.morning] == [9]

    def test_group_by_day_and_dates(self):
        slots = _slots(start="2024-01-12 00:00", end="2024-01-16 23:59")

        grouped = group_by_day(slots)

        assert list(grouped) == [
            pendulum.date(2024, 1, 12),
            pendulum.date(2024, 1, 15),
            pendulum.date(2024, 1, 16),
        ]
        assert all(len(day_slots) == 8 for day_slots in grouped.values())
        assert dates_with_slots(slots) == list(grouped)

    def test_slots_on(self):
        slots = _slots(start="2024-01-15 00:00", end="2024-01-16 23:59")

        assert len(slots_on(slots, pendulum.date(2024, 1, 16))) == 8
        assert slots_on(slots, pendulum.date(2024, 1, 17)) == []

    def test_empty_input(self):
        assert len(split_by_period([])) == 0
        assert group_by_day([]) == {}
        assert dates_with_slots([]) == []


class TestFormatting:
    """Tests for the shared formatting helpers."""

    def test_date_and_time(self):
        dt = _at("2024-01-15 09:05")

        assert format_date(dt) == "January 15, 2024"
        assert format_time(dt) == "9:05 AM"
        assert format_datetime(dt) == "January 15, 2024 9:05 AM"
        assert format_month(dt) == "January 2024"

    def test_afternoon_time(self):
        assert format_time(_at("2024-01-15 16:30")) == "4:30 PM"

    def test_format_slot(self):
        slot = _slots()[0]

        assert format_slot(slot) == "Monday, January 15, 2024 | 9:00 AM – 10:00 AM (60 min)"
