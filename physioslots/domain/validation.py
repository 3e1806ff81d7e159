"""
Validation of appointment details before they reach the booking store.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

import pendulum
from pendulum import DateTime

from .booking import PatientDetails
from .models import WorkingHours

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 180


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_appointment(
    patient: PatientDetails,
    start: Optional[DateTime],
    duration_minutes: int,
    working_hours: WorkingHours,
    now: Optional[DateTime] = None,
) -> ValidationResult:
    """
    Check patient details and the requested time against practice rules.

    Args:
        patient: Contact details from the booking form
        start: Requested appointment start, in the practice timezone
        duration_minutes: Requested length
        working_hours: Opening hours and excluded weekdays
        now: Reference time for the "in the future" check

    Returns:
        ValidationResult listing every problem found
    """
    result = ValidationResult()
    errors = result.errors

    if not (patient.name or "").strip():
        errors.append("Patient name is required")

    email = (patient.email or "").strip()
    if not email:
        errors.append("Patient email is required")
    elif not EMAIL_PATTERN.match(email):
        errors.append("Please enter a valid email address")

    if start is None:
        errors.append("Appointment date and time are required")
    else:
        local_start = start.in_timezone(working_hours.timezone)
        now = now or pendulum.now(working_hours.timezone)

        if local_start <= now:
            errors.append("Appointment must be scheduled for a future date and time")

        if not working_hours.is_working_day(local_start):
            errors.append("Appointments can only be scheduled on weekdays")

        if not working_hours.start_hour <= local_start.hour < working_hours.end_hour:
            errors.append(
                f"Appointments can only be scheduled between "
                f"{working_hours.start_hour}:00 and {working_hours.end_hour}:00"
            )

        closing = local_start.set(hour=working_hours.end_hour, minute=0, second=0, microsecond=0)
        if local_start.add(minutes=duration_minutes) > closing:
            errors.append(
                f"Appointment duration ({duration_minutes} minutes) extends beyond business hours"
            )

    if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        errors.append(
            f"Appointment duration must be between {MIN_DURATION_MINUTES} "
            f"and {MAX_DURATION_MINUTES} minutes"
        )

    return result
