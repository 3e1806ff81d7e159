"""
Records exchanged with the booking, payment and email collaborators.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from pendulum import DateTime

APPOINTMENT_STATUSES = ("scheduled", "confirmed", "completed", "cancelled")
DONATION_TYPES = ("one_time", "monthly")
DAILY_IMPACT_LEVELS = ("minimal", "moderate", "significant", "severe")


@dataclass
class PatientDetails:
    """Contact details entered in the booking wizard."""
    name: str
    email: str
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class SymptomAssessment:
    """Pre-appointment symptom questionnaire."""
    patient_name: str
    patient_email: str
    pain_level: int = 5
    pain_location: List[str] = field(default_factory=list)
    primary_symptom: str = ""
    secondary_symptoms: List[str] = field(default_factory=list)
    symptom_duration: str = ""
    previous_treatments: str = ""
    current_medications: str = ""
    daily_impact: str = "moderate"
    additional_notes: str = ""

    @classmethod
    def default_for(cls, patient: PatientDetails) -> "SymptomAssessment":
        """Placeholder assessment used when the patient skipped the questionnaire."""
        return cls(
            patient_name=patient.name,
            patient_email=patient.email,
            additional_notes=patient.notes or "",
        )

    def to_payload(self) -> Dict[str, Any]:
        """Camel-cased payload expected by the backend functions."""
        data = asdict(self)
        return {_camel(key): value for key, value in data.items()}


@dataclass
class AppointmentRecord:
    """Appointment persisted by the booking store."""
    event_id: str
    patient_name: str
    patient_email: str
    start: DateTime
    end: DateTime
    status: str = "scheduled"
    meet_link: Optional[str] = None
    created_at: Optional[DateTime] = None
    patient_phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class BookingResult:
    """Outcome of a booking: the record plus whether the confirmation went out."""
    appointment: AppointmentRecord
    confirmation_sent: bool


@dataclass
class Donation:
    """Donation form data. ``amount`` is in major currency units."""
    amount: float
    currency: str = "USD"
    donation_type: str = "one_time"
    donor_name: str = ""
    donor_email: str = ""
    message: str = ""
    is_anonymous: bool = False

    @property
    def amount_cents(self) -> int:
        return int(round(self.amount * 100))


@dataclass
class PaymentIntent:
    """Payment intent or subscription created by the payment provider."""
    id: str
    client_secret: str
    amount: int
    currency: str
    status: str
    subscription_id: Optional[str] = None


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
