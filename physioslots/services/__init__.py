"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import AvailabilityProvider, AvailabilityService, AvailabilitySnapshot
from .booking_service import BookingService, BookingStore, EmailSender
from .donation_service import DonationService, PaymentProvider

__all__ = [
    "AvailabilityProvider",
    "AvailabilityService",
    "AvailabilitySnapshot",
    "BookingService",
    "BookingStore",
    "EmailSender",
    "DonationService",
    "PaymentProvider",
]
