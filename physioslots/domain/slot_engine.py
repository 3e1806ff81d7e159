"""
Core business logic for generating and filtering appointment slots.

Pure domain logic: no API calls, no I/O. The calendar snapshot is passed in
by the caller.
"""

from typing import Iterable, Iterator, List, Optional

from .models import AvailableSlot, SlotRequest, TimeInterval, WorkingHours


def intervals_overlap(slot: TimeInterval, busy: TimeInterval) -> bool:
    """Return True if ``slot`` collides with ``busy``."""
    return slot.overlaps(busy)


def is_slot_busy(slot: TimeInterval, busy_intervals: Optional[Iterable[TimeInterval]]) -> bool:
    """Return True if ``slot`` overlaps any of ``busy_intervals``."""
    if not busy_intervals:
        return False
    return any(intervals_overlap(slot, busy) for busy in busy_intervals)


class SlotEngine:
    """
    Computes bookable slots from working hours and a busy-interval snapshot.

    Algorithm:
    1. Walk every calendar day in the requested range (midnight to midnight)
    2. Skip excluded weekdays
    3. Lay fixed-duration slots back to back from the opening hour,
       discarding any slot that would end after closing time
    4. Drop every slot that overlaps a busy interval
    """

    def __init__(self, working_hours: Optional[WorkingHours] = None):
        self.working_hours = working_hours or WorkingHours()

    def generate_candidates(self, request: SlotRequest) -> Iterator[TimeInterval]:
        """
        Yield every candidate slot for the request in chronological order.

        Days are walked on the practice clock, whatever timezone the range
        endpoints carry. An inverted range yields nothing.
        """
        current = request.range_start.in_timezone(self.working_hours.timezone).start_of("day")

        while current <= request.range_end:
            window = self.working_hours.get_working_hours_for_day(current)
            if window is not None:
                yield from self._slots_in_window(window, request.duration_minutes)
            current = current.add(days=1)

    def filter_available(
        self,
        candidates: Iterable[TimeInterval],
        busy_intervals: Optional[Iterable[TimeInterval]],
    ) -> Iterator[TimeInterval]:
        """
        Yield the candidates that overlap none of ``busy_intervals``.

        Busy intervals may arrive in any order; they are not sorted or merged.
        """
        busy = list(busy_intervals or [])
        for candidate in candidates:
            if not is_slot_busy(candidate, busy):
                yield candidate

    def find_available_slots(
        self,
        request: SlotRequest,
        busy_intervals: Optional[Iterable[TimeInterval]] = None,
    ) -> List[AvailableSlot]:
        """
        Generate candidates for ``request`` and keep the free ones.

        Args:
            request: Range and slot duration to generate
            busy_intervals: Snapshot of the calendar's busy periods

        Returns:
            List of AvailableSlot objects in chronological order
        """
        free = self.filter_available(self.generate_candidates(request), busy_intervals)
        return [
            AvailableSlot(time_range=interval, duration_minutes=request.duration_minutes)
            for interval in free
        ]

    @staticmethod
    def _slots_in_window(window: TimeInterval, duration_minutes: int) -> Iterator[TimeInterval]:
        """
        Split one working window into back-to-back slots.

        Example (60 minutes):
        Window: 09:00 - 17:00
        Result: 09:00-10:00, 10:00-11:00, ..., 16:00-17:00
        """
        slot_start = window.start

        while slot_start < window.end:
            slot_end = slot_start.add(minutes=duration_minutes)
            if slot_end <= window.end:
                yield TimeInterval(start=slot_start, end=slot_end)
            slot_start = slot_end
