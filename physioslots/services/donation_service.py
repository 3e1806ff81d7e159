"""
Donation and subscription flow on top of a payment provider.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import pendulum

from ..config import DonationConfig
from ..domain.booking import DONATION_TYPES, Donation, PaymentIntent
from ..domain.exceptions import DonationError
from ..domain.formatting import format_date, format_time
from .booking_service import EmailSender

logger = logging.getLogger(__name__)


class PaymentProvider(Protocol):
    """Creates payment intents (one-time) or subscriptions (monthly)."""

    def create_payment(self, donation: Donation) -> PaymentIntent:
        """Return the intent whose client secret confirms the payment."""

    def cancel_subscription(self, subscription_id: str) -> None:
        """Stop a monthly donation."""


class DonationService:
    def __init__(
        self,
        payments: PaymentProvider,
        settings: Optional[DonationConfig] = None,
        email_sender: Optional[EmailSender] = None,
        receipt_template_id: str = "",
        locale: str = "en",
    ) -> None:
        self._payments = payments
        self._settings = settings or DonationConfig()
        self._email_sender = email_sender
        self._receipt_template_id = receipt_template_id
        self._locale = locale

    def validate(self, donation: Donation) -> None:
        """
        Raises:
            DonationError: If the amount or donation type is not accepted
        """
        settings = self._settings
        if not settings.minimum_amount <= donation.amount <= settings.maximum_amount:
            raise DonationError(
                f"Donation amount must be between {settings.minimum_amount:g} "
                f"and {settings.maximum_amount:g} {settings.currency}"
            )
        if donation.donation_type not in DONATION_TYPES:
            raise DonationError(f"Unknown donation type: {donation.donation_type!r}")

    def start_donation(self, donation: Donation) -> PaymentIntent:
        """Validate the donation and create its payment intent or subscription."""
        self.validate(donation)
        intent = self._payments.create_payment(donation)
        logger.info(
            "Created %s payment %s for %d %s",
            donation.donation_type,
            intent.id,
            intent.amount,
            intent.currency,
        )
        return intent

    def cancel_subscription(self, subscription_id: str) -> None:
        """
        Raises:
            DonationError: If no subscription id was given
        """
        subscription_id = (subscription_id or "").strip()
        if not subscription_id:
            raise DonationError("A subscription id is required to cancel a monthly donation")
        self._payments.cancel_subscription(subscription_id)
        logger.info("Cancelled monthly donation %s", subscription_id)

    def send_receipt(self, donation: Donation, payment: PaymentIntent) -> bool:
        """Email the donor a receipt. Returns False when there is nobody to send to."""
        if self._email_sender is None or not self._receipt_template_id:
            return False
        if donation.is_anonymous or not donation.donor_email:
            return False

        now = pendulum.now()
        self._email_sender.send(
            self._receipt_template_id,
            donation.donor_email,
            {
                "to_name": donation.donor_name,
                "donor_name": donation.donor_name,
                "donation_amount": f"{donation.amount:.2f}",
                "donation_currency": donation.currency.upper(),
                "donation_message": donation.message,
                "donation_id": payment.id,
                "donation_type": donation.donation_type,
                "donation_date": format_date(now, self._locale),
                "donation_time": format_time(now, self._locale),
            },
        )
        return True
