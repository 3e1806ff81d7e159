"""
Booking of a previously listed slot and its confirmation email.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import pendulum

from ..domain.booking import AppointmentRecord, BookingResult, PatientDetails, SymptomAssessment
from ..domain.exceptions import (
    AppointmentValidationError,
    CollaboratorError,
    SlotUnavailableError,
)
from ..domain.formatting import format_date, format_time
from ..domain.models import AvailableSlot, WorkingHours
from ..domain.validation import validate_appointment
from .availability_service import AvailabilityService

logger = logging.getLogger(__name__)


class BookingStore(Protocol):
    """Persists appointments (calendar events) for the practice."""

    def create_appointment(
        self,
        slot: AvailableSlot,
        patient: PatientDetails,
        assessment: SymptomAssessment,
    ) -> AppointmentRecord:
        """Persist the appointment and return the stored record."""

    def get_appointment(self, event_id: str) -> AppointmentRecord:
        """Return a stored appointment by its booking reference."""

    def cancel_appointment(self, event_id: str) -> None:
        """Cancel a stored appointment."""


class EmailSender(Protocol):
    """Delivers templated emails."""

    def send(self, template_id: str, to_email: str, params: Dict[str, Any]) -> None:
        """Send ``template_id`` rendered with ``params`` to ``to_email``."""


class BookingService:
    """
    Books one validated, still-free slot and notifies the patient.
    """

    def __init__(
        self,
        availability: AvailabilityService,
        store: BookingStore,
        working_hours: WorkingHours,
        email_sender: Optional[EmailSender] = None,
        confirmation_template_id: str = "",
        locale: str = "en",
    ) -> None:
        self._availability = availability
        self._store = store
        self._working_hours = working_hours
        self._email_sender = email_sender
        self._confirmation_template_id = confirmation_template_id
        self._locale = locale

    def book(
        self,
        slot: AvailableSlot,
        patient: PatientDetails,
        assessment: Optional[SymptomAssessment] = None,
        now: Optional[pendulum.DateTime] = None,
    ) -> BookingResult:
        """
        Validate, re-check availability, persist and confirm an appointment.

        Raises:
            AppointmentValidationError: If the patient details or time are invalid
            SlotUnavailableError: If the slot was taken since it was listed
            CollaboratorError: If the calendar or store cannot be reached
        """
        validation = validate_appointment(
            patient,
            slot.start,
            slot.duration_minutes,
            self._working_hours,
            now=now,
        )
        if not validation.is_valid:
            raise AppointmentValidationError(validation.errors)

        if not self._availability.is_slot_available(slot.start, slot.end):
            raise SlotUnavailableError(
                f"The slot {slot} is no longer available. Please choose another time."
            )

        assessment = assessment or SymptomAssessment.default_for(patient)
        appointment = self._store.create_appointment(slot, patient, assessment)
        logger.info("Booked appointment %s for %s", appointment.event_id, slot)

        return BookingResult(
            appointment=appointment,
            confirmation_sent=self._send_confirmation(appointment),
        )

    def get_appointment(self, event_id: str) -> AppointmentRecord:
        """Look up a booked appointment by its booking reference."""
        return self._store.get_appointment(_clean_event_id(event_id))

    def cancel(self, event_id: str) -> None:
        """Cancel a booked appointment by its booking reference."""
        event_id = _clean_event_id(event_id)
        self._store.cancel_appointment(event_id)
        logger.info("Cancelled appointment %s", event_id)

    def _send_confirmation(self, appointment: AppointmentRecord) -> bool:
        if self._email_sender is None or not self._confirmation_template_id:
            logger.debug("No confirmation email configured for %s", appointment.event_id)
            return False

        params = {
            "to_name": appointment.patient_name,
            "appointment_id": appointment.event_id,
            "appointment_date": format_date(appointment.start, self._locale),
            "appointment_time": format_time(appointment.start, self._locale),
            "meet_link": appointment.meet_link or "",
        }
        try:
            self._email_sender.send(self._confirmation_template_id, appointment.patient_email, params)
        except CollaboratorError as exc:
            # The appointment already exists; report instead of rolling back.
            logger.warning(
                "Could not send confirmation for appointment %s: %s", appointment.event_id, exc
            )
            return False
        return True


def _clean_event_id(event_id: str) -> str:
    event_id = (event_id or "").strip()
    if not event_id:
        raise ValueError("Invalid event ID provided")
    return event_id
