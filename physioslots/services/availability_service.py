"""
Application service answering availability queries.

The service fetches a busy-interval snapshot once per requested range through
an ``AvailabilityProvider`` and delegates slot generation and filtering to the
domain-level ``SlotEngine``. Any provider failure propagates unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Protocol

import pendulum
from pendulum import Date, DateTime

from ..domain.grouping import DayPeriods, dates_with_slots, split_by_period
from ..domain.models import AvailableSlot, BusyInterval, SlotRequest, TimeInterval
from ..domain.slot_engine import SlotEngine, is_slot_busy

logger = logging.getLogger(__name__)


class AvailabilityProvider(Protocol):
    """Calendar behaviour needed by the service."""

    def check_availability(
        self,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[BusyInterval]:
        """Return the busy intervals intersecting the range, in any order."""


@dataclass
class AvailabilitySnapshot:
    """Result of one availability query."""
    request: SlotRequest
    slots: List[AvailableSlot]
    busy_intervals: List[BusyInterval] = field(default_factory=list)

    def dates(self) -> List[Date]:
        return dates_with_slots(self.slots)

    def periods(self, cutoff_hour: int = 12) -> DayPeriods:
        return split_by_period(self.slots, cutoff_hour=cutoff_hour)

    def __bool__(self) -> bool:
        return bool(self.slots)


class AvailabilityService:
    """
    Orchestrates busy-time retrieval and slot calculation.
    """

    def __init__(self, provider: AvailabilityProvider, engine: SlotEngine) -> None:
        self._provider = provider
        self._engine = engine

    @property
    def timezone(self) -> str:
        return self._engine.working_hours.timezone

    def find_slots(self, request: SlotRequest) -> AvailabilitySnapshot:
        """
        Validate the request, fetch busy data once and compute free slots.

        Raises:
            InvalidRangeError: Before any calendar call, for inverted ranges
            CollaboratorError: If the calendar cannot be queried
        """
        request.validate()

        logger.debug(
            "Checking availability from %s to %s (%d min)",
            request.range_start,
            request.range_end,
            request.duration_minutes,
        )
        busy = list(self._provider.check_availability(request.range_start, request.range_end))
        slots = self._engine.find_available_slots(request, busy)
        logger.debug("%d busy intervals, %d available slots", len(busy), len(slots))

        return AvailabilitySnapshot(request=request, slots=slots, busy_intervals=busy)

    def slots_for_day(self, day: Date, duration_minutes: int) -> AvailabilitySnapshot:
        """Available slots for a single local day."""
        start = pendulum.datetime(day.year, day.month, day.day, tz=self.timezone)
        return self.find_slots(
            SlotRequest(
                range_start=start,
                range_end=start.end_of("day"),
                duration_minutes=duration_minutes,
            )
        )

    def slots_for_month(self, year: int, month: int, duration_minutes: int) -> AvailabilitySnapshot:
        """Available slots for a whole month, fetched with a single calendar call."""
        start = pendulum.datetime(year, month, 1, tz=self.timezone)
        return self.find_slots(
            SlotRequest(
                range_start=start,
                range_end=start.end_of("month"),
                duration_minutes=duration_minutes,
            )
        )

    def available_dates(self, year: int, month: int, duration_minutes: int) -> List[Date]:
        """Dates of the month with at least one free slot."""
        return self.slots_for_month(year, month, duration_minutes).dates()

    def is_slot_available(self, start: DateTime, end: DateTime) -> bool:
        """Check a single window against a fresh busy snapshot."""
        window = TimeInterval(start=start, end=end)
        busy = self._provider.check_availability(start, end)
        return not is_slot_busy(window, busy)
