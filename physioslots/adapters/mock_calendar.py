"""
Offline collaborators for running without the hosted backend.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.booking import AppointmentRecord, PatientDetails, SymptomAssessment
from ..domain.exceptions import CollaboratorError
from ..domain.models import AvailableSlot, BusyInterval, weekday_of

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarProvider:
    """
    Calendar that serves busy intervals from a JSON file and keeps bookings in memory.

    The file holds a list of events. Fixed events carry ISO ``start``/``end``;
    recurring ones carry ``weekday`` (0=Sunday) with ``startTime``/``endTime``
    clock times and repeat every week.
    """

    def __init__(
        self,
        timezone: str = "America/New_York",
        data_file: Optional[Path] = None,
        events: Optional[List[Dict[str, Any]]] = None,
    ):
        self.timezone = timezone
        self.events = events if events is not None else self._load_events(data_file or DEFAULT_DATA_FILE)
        self.appointments: Dict[str, AppointmentRecord] = {}
        self.calls: List[tuple] = []

    @staticmethod
    def _load_events(data_file: Path) -> List[Dict[str, Any]]:
        if not data_file.exists():
            return []
        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def check_availability(self, range_start: DateTime, range_end: DateTime) -> List[BusyInterval]:
        """Return busy intervals overlapping the window, booked appointments included."""
        self.calls.append((range_start, range_end))
        busy: List[BusyInterval] = []

        for event in self.events:
            try:
                busy.extend(self._expand_event(event, range_start, range_end))
            except (KeyError, ValueError) as exc:
                raise CollaboratorError(f"Invalid mock calendar event {event!r}: {exc}") from exc

        for record in self.appointments.values():
            if record.start < range_end and record.end > range_start:
                busy.append(BusyInterval(start=record.start, end=record.end, event_id=record.event_id))

        return busy

    def create_appointment(
        self,
        slot: AvailableSlot,
        patient: PatientDetails,
        assessment: SymptomAssessment,
    ) -> AppointmentRecord:
        event_id = f"mock-event-{uuid.uuid4().hex[:12]}"
        record = AppointmentRecord(
            event_id=event_id,
            patient_name=patient.name,
            patient_email=patient.email,
            start=slot.start,
            end=slot.end,
            created_at=pendulum.now(self.timezone),
        )
        self.appointments[event_id] = record
        return record

    def get_appointment(self, event_id: str) -> AppointmentRecord:
        record = self.appointments.get(event_id)
        if record is None:
            raise CollaboratorError(f"Unknown appointment: {event_id}", status=404)
        return record

    def cancel_appointment(self, event_id: str) -> None:
        if self.appointments.pop(event_id, None) is None:
            raise CollaboratorError(f"Unknown appointment: {event_id}", status=404)

    def _expand_event(
        self,
        event: Dict[str, Any],
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[BusyInterval]:
        summary = event.get("summary")
        event_id = event.get("eventId")

        if "weekday" not in event:
            interval = BusyInterval(
                start=pendulum.parse(event["start"], tz=self.timezone),
                end=pendulum.parse(event["end"], tz=self.timezone),
                event_id=event_id,
                summary=summary,
            )
            if interval.start < range_end and interval.end > range_start:
                return [interval]
            return []

        start_hour, start_minute = (int(part) for part in event["startTime"].split(":"))
        end_hour, end_minute = (int(part) for part in event["endTime"].split(":"))
        occurrences: List[BusyInterval] = []
        day = range_start.in_timezone(self.timezone).start_of("day")

        while day <= range_end:
            if weekday_of(day) == event["weekday"]:
                interval = BusyInterval(
                    start=day.set(hour=start_hour, minute=start_minute),
                    end=day.set(hour=end_hour, minute=end_minute),
                    event_id=event_id,
                    summary=summary,
                )
                if interval.start < range_end and interval.end > range_start:
                    occurrences.append(interval)
            day = day.add(days=1)

        return occurrences


class ConsoleEmailSender:
    """Email sender that only logs and records what would have been sent."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    def send(self, template_id: str, to_email: str, params: Dict[str, Any]) -> None:
        self.sent.append({"template_id": template_id, "to_email": to_email, "params": params})
        logger.info("Mock email %s to %s: %s", template_id, to_email, params)
