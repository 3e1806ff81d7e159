"""
Payment provider calling the backend's ``create-payment-intent`` and
``unsubscribe-donation`` functions.
"""

from ..domain.booking import Donation, PaymentIntent
from ..domain.exceptions import CollaboratorError
from .edge_functions import EdgeFunctionClient

CREATE_PAYMENT_INTENT = "create-payment-intent"
UNSUBSCRIBE_DONATION = "unsubscribe-donation"


class StripePaymentProvider:
    """
    Creates a Stripe payment intent (one-time) or subscription (monthly).

    The card itself is confirmed client-side with the returned client secret.
    """

    def __init__(self, client: EdgeFunctionClient):
        self.client = client

    def create_payment(self, donation: Donation) -> PaymentIntent:
        data = self.client.invoke(
            CREATE_PAYMENT_INTENT,
            {
                "amount": donation.amount_cents,
                "currency": donation.currency.lower(),
                "donationType": donation.donation_type,
                "metadata": {
                    "donorName": donation.donor_name or "Anonymous",
                    "donorEmail": donation.donor_email,
                    "message": donation.message,
                    "isAnonymous": str(donation.is_anonymous).lower(),
                    "donationType": donation.donation_type,
                },
            },
        )

        subscription_id = data.get("subscriptionId")
        intent_id = subscription_id or data.get("paymentIntentId") or data.get("id")
        if not intent_id or not data.get("clientSecret"):
            kind = "subscription" if donation.donation_type == "monthly" else "payment intent"
            raise CollaboratorError(
                data.get("error") or f"Failed to create {kind}",
                function_name=CREATE_PAYMENT_INTENT,
            )

        return PaymentIntent(
            id=intent_id,
            client_secret=data["clientSecret"],
            amount=int(data.get("amount", donation.amount_cents)),
            currency=data.get("currency", donation.currency.lower()),
            status=data.get("status", "requires_payment_method"),
            subscription_id=subscription_id,
        )

    def cancel_subscription(self, subscription_id: str) -> None:
        """
        Cancel a monthly donation.

        ``unsubscribe-donation`` takes the id as a query parameter and answers
        with a page; unknown or already cancelled subscriptions come back as
        4xx and raise CollaboratorError.
        """
        self.client.submit(UNSUBSCRIBE_DONATION, {"subscription_id": subscription_id})
