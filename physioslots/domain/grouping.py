"""
Stateless grouping helpers over filtered slot sequences.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from pendulum import Date

from .models import AvailableSlot

MORNING_CUTOFF_HOUR = 12


@dataclass
class DayPeriods:
    """Slots of one day split at the morning cutoff."""
    morning: List[AvailableSlot] = field(default_factory=list)
    afternoon: List[AvailableSlot] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.morning) + len(self.afternoon)


def split_by_period(
    slots: Iterable[AvailableSlot],
    cutoff_hour: int = MORNING_CUTOFF_HOUR,
) -> DayPeriods:
    """Slots starting before ``cutoff_hour`` are morning, the rest afternoon."""
    periods = DayPeriods()
    for slot in slots:
        if slot.start.hour < cutoff_hour:
            periods.morning.append(slot)
        else:
            periods.afternoon.append(slot)
    return periods


def group_by_day(slots: Iterable[AvailableSlot]) -> Dict[Date, List[AvailableSlot]]:
    """Group slots by the local date they start on, keeping chronological order."""
    grouped: Dict[Date, List[AvailableSlot]] = {}
    for slot in slots:
        grouped.setdefault(slot.start.date(), []).append(slot)
    return grouped


def dates_with_slots(slots: Iterable[AvailableSlot]) -> List[Date]:
    """Return the sorted dates that have at least one slot."""
    return sorted(group_by_day(slots))


def slots_on(slots: Iterable[AvailableSlot], day: Date) -> List[AvailableSlot]:
    """Return the slots starting on ``day``."""
    return [slot for slot in slots if slot.start.date() == day]
