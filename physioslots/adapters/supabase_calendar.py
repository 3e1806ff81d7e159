"""
Calendar and booking store backed by the practice's backend functions.
"""

import logging
from typing import Any, Dict, List

import pendulum
from pendulum import DateTime

from ..domain.booking import AppointmentRecord, PatientDetails, SymptomAssessment
from ..domain.exceptions import CollaboratorError
from ..domain.models import AvailableSlot, BusyInterval
from .edge_functions import EdgeFunctionClient

logger = logging.getLogger(__name__)

CHECK_AVAILABILITY = "check-availability"
NEW_APPOINTMENT = "new-appointment"
GET_APPOINTMENT = "get-appointment"
CANCEL_APPOINTMENT = "cancel-appointment"


class SupabaseCalendarProvider:
    """
    Availability provider and booking store using the hosted calendar functions.

    ``check-availability`` answers with:
    {
        "available": false,
        "busyTimes": [
            {"start": "2024-01-15T15:00:00Z", "end": "...", "eventId": "...", "summary": "..."}
        ]
    }
    """

    def __init__(self, client: EdgeFunctionClient, timezone: str = "America/New_York"):
        self.client = client
        self.timezone = timezone

    def check_availability(self, range_start: DateTime, range_end: DateTime) -> List[BusyInterval]:
        """
        Fetch busy intervals for the range.

        Raises:
            CollaboratorError: On a reported error or a malformed busy entry
        """
        data = self.client.invoke(
            CHECK_AVAILABILITY,
            {
                "start": range_start.in_timezone("UTC").to_iso8601_string(),
                "end": range_end.in_timezone("UTC").to_iso8601_string(),
            },
        )
        if data.get("error"):
            raise CollaboratorError(str(data["error"]), function_name=CHECK_AVAILABILITY)

        return [self._parse_busy(item) for item in data.get("busyTimes") or []]

    def create_appointment(
        self,
        slot: AvailableSlot,
        patient: PatientDetails,
        assessment: SymptomAssessment,
    ) -> AppointmentRecord:
        data = self.client.invoke(
            NEW_APPOINTMENT,
            {
                "startTime": slot.start.in_timezone("UTC").to_iso8601_string(),
                "endTime": slot.end.in_timezone("UTC").to_iso8601_string(),
                "patientName": patient.name,
                "patientEmail": patient.email,
                "symptomAssessment": assessment.to_payload(),
            },
        )
        if not data.get("success"):
            raise CollaboratorError(
                data.get("error") or "Failed to create appointment", function_name=NEW_APPOINTMENT
            )

        details = data.get("appointmentDetails")
        if not data.get("eventId") or not isinstance(details, dict):
            raise CollaboratorError(
                "Incomplete response from appointment service", function_name=NEW_APPOINTMENT
            )

        return self._parse_appointment(details, fallback_event_id=data["eventId"])

    def get_appointment(self, event_id: str) -> AppointmentRecord:
        """
        Look up a stored appointment by its booking reference.

        ``get-appointment`` answers with the stored row, whose date and time
        are the UTC start of the appointment:
        {
            "success": true,
            "appointment": {
                "id": "...", "googleEventId": "...", "patientName": "...",
                "appointmentDate": "2024-01-15", "appointmentTime": "15:00:00",
                "duration": 60, "status": "scheduled", ...
            }
        }
        """
        data = self.client.invoke(GET_APPOINTMENT, {"appointmentId": event_id})
        appointment = data.get("appointment")
        if not data.get("success") or not isinstance(appointment, dict):
            raise CollaboratorError(
                data.get("error") or "Appointment not found", function_name=GET_APPOINTMENT
            )

        try:
            start = pendulum.parse(
                f"{appointment['appointmentDate']}T{appointment['appointmentTime']}", tz="UTC"
            ).in_timezone(self.timezone)
            created_at = appointment.get("createdAt")
            return AppointmentRecord(
                event_id=appointment.get("id") or event_id,
                patient_name=appointment["patientName"],
                patient_email=appointment["patientEmail"],
                start=start,
                end=start.add(minutes=int(appointment["duration"])),
                status=appointment.get("status", "scheduled"),
                meet_link=appointment.get("meetLink"),
                created_at=self._parse_datetime(created_at) if created_at else None,
                patient_phone=appointment.get("patientPhone") or None,
                notes=appointment.get("notes") or None,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CollaboratorError(
                f"Malformed appointment record: {exc}", function_name=GET_APPOINTMENT
            ) from exc

    def cancel_appointment(self, event_id: str) -> None:
        data = self.client.invoke(CANCEL_APPOINTMENT, {"appointmentId": event_id})
        if not data.get("success"):
            raise CollaboratorError(
                data.get("error") or "Failed to cancel appointment", function_name=CANCEL_APPOINTMENT
            )

    def _parse_busy(self, item: Dict[str, Any]) -> BusyInterval:
        try:
            return BusyInterval(
                start=self._parse_datetime(item["start"]),
                end=self._parse_datetime(item["end"]),
                event_id=item.get("eventId"),
                summary=item.get("summary"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            # Dropping the entry could hand out a taken slot.
            raise CollaboratorError(
                f"Malformed busy interval from calendar: {item!r} ({exc})",
                function_name=CHECK_AVAILABILITY,
            ) from exc

    def _parse_appointment(self, details: Dict[str, Any], fallback_event_id: str) -> AppointmentRecord:
        try:
            created_at = details.get("createdAt")
            return AppointmentRecord(
                event_id=details.get("eventId") or fallback_event_id,
                patient_name=details["patientName"],
                patient_email=details["patientEmail"],
                start=self._parse_datetime(details["startTime"]),
                end=self._parse_datetime(details["endTime"]),
                status=details.get("status", "scheduled"),
                meet_link=details.get("meetLink"),
                created_at=self._parse_datetime(created_at) if created_at else None,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CollaboratorError(
                f"Malformed appointment details: {exc}", function_name=NEW_APPOINTMENT
            ) from exc

    def _parse_datetime(self, value: str) -> DateTime:
        """
        Parse an ISO 8601 string into the practice timezone.
        """
        dt = pendulum.parse(value)

        if isinstance(dt, DateTime):
            return dt.in_timezone(self.timezone)

        raise ValueError(f"Could not parse datetime: {value}")
