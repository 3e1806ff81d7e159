"""
Domain-specific exception hierarchy for the physioslots application.
"""

from typing import List, Optional


class PhysioSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidRangeError(PhysioSlotsError):
    """Raised when a slot query has an inverted range or a non-positive duration."""


class CollaboratorError(PhysioSlotsError):
    """Raised when a backend collaborator rejects a call or returns unusable data."""

    retryable = False

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        function_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.function_name = function_name


class CollaboratorUnavailableError(CollaboratorError):
    """Raised on network failures, timeouts, 429 and 5xx answers. Safe to retry."""

    retryable = True


class AppointmentValidationError(PhysioSlotsError):
    """Raised when appointment details fail validation."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class SlotUnavailableError(PhysioSlotsError):
    """Raised when a slot was taken between listing and booking."""


class InvalidTransitionError(PhysioSlotsError):
    """Raised when a wizard event is not allowed in the current step."""


class DonationError(PhysioSlotsError):
    """Raised when donation data is rejected before contacting the payment provider."""
