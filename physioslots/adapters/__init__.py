"""
Adapters layer - External integrations (backend functions, Stripe, EmailJS).
"""

from .edge_functions import EdgeFunctionClient
from .emailjs import EmailJSSender
from .mock_calendar import ConsoleEmailSender, MockCalendarProvider
from .stripe_payments import StripePaymentProvider
from .supabase_calendar import SupabaseCalendarProvider

__all__ = [
    "EdgeFunctionClient",
    "EmailJSSender",
    "ConsoleEmailSender",
    "MockCalendarProvider",
    "StripePaymentProvider",
    "SupabaseCalendarProvider",
]
