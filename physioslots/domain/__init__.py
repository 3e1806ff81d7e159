"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import AvailableSlot, BusyInterval, SlotRequest, TimeInterval, WorkingHours
from .slot_engine import SlotEngine, intervals_overlap, is_slot_busy

__all__ = [
    "AvailableSlot",
    "BusyInterval",
    "SlotRequest",
    "TimeInterval",
    "WorkingHours",
    "SlotEngine",
    "intervals_overlap",
    "is_slot_busy",
]
